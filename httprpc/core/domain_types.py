"""Domain Types — scalar parameter types, descriptor labels, and wire constants.

Invariants:
    - ScalarType covers exactly the ten coercible wire types
    - TypeLabel values are the literal strings written into descriptors
    - Fixed-width numeric NewTypes unwrap to a builtin via __supertype__

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support,
      and contract authors annotate `a: Int` exactly like `a: int`
    - str Enums: descriptor labels serialize without custom encoders
"""

from decimal import Decimal
from enum import Enum
from typing import NewType


JSON_MIME_TYPE = "application/json; charset=UTF-8"
TEXT_MIME_TYPE = "text/plain; charset=UTF-8"


# ─── Fixed-width numeric types ───────────────────────────────────

Byte = NewType("Byte", int)              # -2**7 .. 2**7-1
Short = NewType("Short", int)            # -2**15 .. 2**15-1
Int = NewType("Int", int)                # -2**31 .. 2**31-1
Long = NewType("Long", int)              # -2**63 .. 2**63-1
Float = NewType("Float", float)          # single precision on the wire
Double = NewType("Double", float)
BigInteger = NewType("BigInteger", int)
BigDecimal = NewType("BigDecimal", Decimal)


# ─── Enums ───────────────────────────────────────────────────────

class ScalarType(str, Enum):
    """Wire types a request parameter can be coerced into."""
    STRING = "string"
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BIG_INTEGER = "big_integer"
    BIG_DECIMAL = "big_decimal"
    BOOLEAN = "boolean"


class ParameterKind(str, Enum):
    """Single value or repeated request parameter."""
    SCALAR = "scalar"
    LIST = "list"


class TypeLabel(str, Enum):
    """Type names reported in operation descriptors."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"
    UNSUPPORTED = "unsupported"


# Signed integer bounds, inclusive
INTEGER_BOUNDS: dict[ScalarType, tuple[int, int]] = {
    ScalarType.BYTE: (-(2 ** 7), 2 ** 7 - 1),
    ScalarType.SHORT: (-(2 ** 15), 2 ** 15 - 1),
    ScalarType.INT: (-(2 ** 31), 2 ** 31 - 1),
    ScalarType.LONG: (-(2 ** 63), 2 ** 63 - 1),
}

# Annotation → scalar type. Builtins map to their natural precision.
ANNOTATION_SCALAR_TYPES: dict[object, ScalarType] = {
    str: ScalarType.STRING,
    bool: ScalarType.BOOLEAN,
    int: ScalarType.BIG_INTEGER,
    float: ScalarType.DOUBLE,
    Decimal: ScalarType.BIG_DECIMAL,
    Byte: ScalarType.BYTE,
    Short: ScalarType.SHORT,
    Int: ScalarType.INT,
    Long: ScalarType.LONG,
    Float: ScalarType.FLOAT,
    Double: ScalarType.DOUBLE,
    BigInteger: ScalarType.BIG_INTEGER,
    BigDecimal: ScalarType.BIG_DECIMAL,
}
