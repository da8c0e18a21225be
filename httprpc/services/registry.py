"""Operation Registry — name → Operation index for one service contract.

Invariants:
    - Built once at startup, frozen afterwards (MappingProxyType), shared by all
      requests without locking
    - Lookup is exact and case-sensitive; a miss raises OperationNotFoundError
    - Duplicate names during construction: last registration wins
    - operations() is ordered by ascending name

Design Decisions:
    - One introspection pass at startup (from_contract) instead of per-request
      reflection; register() stays public for hand-written tables
    - Unsupported parameter types are reported at registration: strict mode raises
      ConfigurationError, lenient mode logs and defers the fault to coercion
"""

import inspect
import logging
from collections.abc import Callable, Sequence
from types import MappingProxyType
from typing import Any, get_args, get_origin, get_type_hints

from httprpc.core.contract import WebService
from httprpc.core.domain_types import ANNOTATION_SCALAR_TYPES, ParameterKind, ScalarType
from httprpc.core.errors import ConfigurationError, OperationNotFoundError
from httprpc.core.operations import Operation, Parameter
from httprpc.core.type_labels import label_of, unwrap_annotation

logger = logging.getLogger(__name__)

_LIST_ORIGINS = frozenset({list, Sequence})


def scalar_type_of(annotation: Any) -> ScalarType | None:
    """Scalar wire type for an annotation, or None when unsupported."""
    scalar = ANNOTATION_SCALAR_TYPES.get(annotation)
    if scalar is not None:
        return scalar
    return ANNOTATION_SCALAR_TYPES.get(_strip_optional(annotation))


def _strip_optional(annotation: Any) -> Any:
    # Keep NewTypes intact: they carry the fixed-width information
    args = get_args(annotation)
    if args and type(None) in args:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def build_parameter(name: str, annotation: Any) -> Parameter:
    """Classify one declared parameter."""
    base = _strip_optional(annotation)
    origin = get_origin(unwrap_annotation(base))
    if origin in _LIST_ORIGINS:
        args = get_args(unwrap_annotation(base))
        element = scalar_type_of(args[0]) if len(args) == 1 else None
        return Parameter(name, ParameterKind.LIST, element, annotation)
    return Parameter(name, ParameterKind.SCALAR, scalar_type_of(base), annotation)


def build_operation(name: str, function: Callable[..., Any]) -> Operation:
    """Build an Operation from an annotated function taking `self` first."""
    try:
        hints = get_type_hints(function)
    except Exception as e:
        raise ConfigurationError(f"Cannot resolve annotations of '{name}': {e}") from e
    signature = inspect.signature(function)
    parameters = []
    for index, (param_name, param) in enumerate(signature.parameters.items()):
        if index == 0:
            continue  # self
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise ConfigurationError(
                f"Operation '{name}' cannot declare *args or **kwargs.",
            )
        annotation = hints.get(param_name, inspect.Signature.empty)
        parameters.append(build_parameter(param_name, annotation))
    returns = label_of(hints.get("return", inspect.Signature.empty))
    return Operation(name, function, tuple(parameters), returns)


class OperationRegistry:
    """Write-once, read-many operation table for one contract."""

    def __init__(self, contract: type[WebService], strict: bool = True):
        self.contract = contract
        self._strict = strict
        self._building: dict[str, Operation] | None = {}
        self._operations: MappingProxyType[str, Operation] = MappingProxyType({})

    @classmethod
    def from_contract(
        cls, contract: type[WebService], strict: bool = True,
    ) -> "OperationRegistry":
        """Register every public function declared in the contract class body."""
        registry = cls(contract, strict=strict)
        for name, member in vars(contract).items():
            if name.startswith("_") or not inspect.isfunction(member):
                continue
            registry.register(build_operation(name, member))
        return registry.freeze()

    def register(self, operation: Operation) -> None:
        if self._building is None:
            raise RuntimeError("Registry is frozen.")
        unsupported = operation.unsupported_parameters
        if unsupported:
            names = ", ".join(p.name for p in unsupported)
            if self._strict:
                raise ConfigurationError(
                    f"Operation '{operation.name}' declares unsupported "
                    f"parameter types: {names}",
                )
            logger.warning(
                f"Operation '{operation.name}' has unsupported parameter "
                f"types ({names}); calls will be rejected",
                extra={"operation": operation.name},
            )
        if operation.name in self._building:
            logger.debug(
                f"Operation '{operation.name}' registered twice; keeping last",
                extra={"operation": operation.name},
            )
        self._building[operation.name] = operation

    def freeze(self) -> "OperationRegistry":
        if self._building is not None:
            self._operations = MappingProxyType(dict(sorted(self._building.items())))
            self._building = None
            logger.info(
                f"Registered {len(self._operations)} operations for "
                f"{self.contract.__name__}",
            )
        return self

    @property
    def frozen(self) -> bool:
        return self._building is None

    def get(self, name: str) -> Operation:
        operation = self._operations.get(name)
        if operation is None:
            raise OperationNotFoundError(name)
        return operation

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def names(self) -> list[str]:
        return list(self._operations)

    def operations(self) -> list[Operation]:
        return list(self._operations.values())
