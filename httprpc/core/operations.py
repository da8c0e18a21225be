"""Operation Schema — immutable description of one invocable operation.

Invariants:
    - Parameters keep declaration order (arguments are passed positionally)
    - scalar_type is None only for parameters whose declared type is unsupported
    - Operation and Parameter are frozen: built once at registration

Design Decisions:
    - Handler stored as an unbound callable taking (service, *args): the
      registry never holds a service instance, only the contract class
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from httprpc.core.domain_types import ParameterKind, ScalarType, TypeLabel
from httprpc.core.type_labels import label_of


@dataclass(frozen=True)
class Parameter:
    """One declared operation parameter."""
    name: str
    kind: ParameterKind
    scalar_type: ScalarType | None
    annotation: Any = None

    @property
    def is_list(self) -> bool:
        return self.kind is ParameterKind.LIST

    @property
    def supported(self) -> bool:
        return self.scalar_type is not None

    @property
    def type_label(self) -> TypeLabel:
        if self.is_list:
            return TypeLabel.ARRAY
        return label_of(self.annotation) or TypeLabel.UNSUPPORTED


@dataclass(frozen=True)
class Operation:
    """A named operation on a service contract."""
    name: str
    handler: Callable[..., Any] = field(compare=False)
    parameters: tuple[Parameter, ...] = ()
    returns: TypeLabel | None = None

    @property
    def has_return_value(self) -> bool:
        return self.returns is not None

    @property
    def unsupported_parameters(self) -> list[Parameter]:
        return [p for p in self.parameters if not p.supported]
