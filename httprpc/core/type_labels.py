"""Type Labels — static classification of declared types and runtime values.

Invariants:
    - bool is classified before int (bool subclasses int)
    - None / NoneType as a declared return type means "no return value" → None, not a label
    - Resource[T] is labelled as T; a bare Resource carries no type and is UNSUPPORTED
    - Anything outside the table is TypeLabel.UNSUPPORTED, never an exception

Design Decisions:
    - Works on typing constructs (list[int], Optional[str], NewType) via get_origin/get_args
    - label_of_value mirrors label_of for runtime results, where None is TypeLabel.NULL
"""

import inspect
import numbers
import types
from collections.abc import Iterator, Mapping, Sequence
from decimal import Decimal
from typing import Annotated, Any, Union, get_args, get_origin

from httprpc.core.domain_types import TypeLabel
from httprpc.core.values import Resource

_NONE_TYPES = (None, type(None))


def unwrap_annotation(annotation: Any) -> Any:
    """Strip NewType, Annotated and Optional wrappers down to the real type."""
    while True:
        supertype = getattr(annotation, "__supertype__", None)
        if supertype is not None:
            annotation = supertype
            continue
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is types.UnionType:
            members = [a for a in get_args(annotation) if a is not type(None)]
            if len(members) == 1:
                annotation = members[0]
                continue
        return annotation


def label_of(annotation: Any) -> TypeLabel | None:
    """Classify a declared type. Returns None for "no return value"."""
    if annotation in _NONE_TYPES:
        return None
    if annotation is inspect.Signature.empty:
        return TypeLabel.UNSUPPORTED

    annotation = unwrap_annotation(annotation)
    origin = get_origin(annotation) or annotation
    if not isinstance(origin, type):
        return TypeLabel.UNSUPPORTED

    if origin is Resource:
        args = get_args(annotation)
        if not args:
            return TypeLabel.UNSUPPORTED
        return label_of(args[0]) or TypeLabel.NULL
    if issubclass(origin, bool):
        return TypeLabel.BOOLEAN
    if issubclass(origin, str):
        return TypeLabel.STRING
    if issubclass(origin, (numbers.Real, Decimal)):
        return TypeLabel.NUMBER
    if issubclass(origin, Mapping):
        args = get_args(annotation)
        if args and unwrap_annotation(args[0]) is not str:
            return TypeLabel.UNSUPPORTED
        return TypeLabel.OBJECT
    if issubclass(origin, (bytes, bytearray)):
        return TypeLabel.UNSUPPORTED
    if issubclass(origin, (Sequence, Iterator)):
        return TypeLabel.ARRAY
    return TypeLabel.UNSUPPORTED


def label_of_value(value: Any) -> TypeLabel:
    """Classify a runtime value from an operation result."""
    if isinstance(value, Resource):
        return label_of_value(value.value)
    if value is None:
        return TypeLabel.NULL
    if isinstance(value, bool):
        return TypeLabel.BOOLEAN
    if isinstance(value, str):
        return TypeLabel.STRING
    if isinstance(value, (int, float, Decimal)):
        return TypeLabel.NUMBER
    if isinstance(value, Mapping):
        return TypeLabel.OBJECT
    if isinstance(value, (list, tuple, Iterator)):
        return TypeLabel.ARRAY
    return TypeLabel.UNSUPPORTED
