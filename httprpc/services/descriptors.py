"""Descriptor Builder — self-describing operation metadata for introspection requests.

Invariants:
    - Descriptors ordered by ascending operation name
    - description keys: "<operation>" and "<operation>_<parameter>"
    - Missing bundle or key → the "description" entry is omitted, never an error
    - "returns" omitted for operations without a return value
"""

from typing import Any

from httprpc.core.localization import TextBundle
from httprpc.core.operations import Operation, Parameter
from httprpc.services.registry import OperationRegistry


def _describe(bundle: TextBundle | None, key: str) -> str | None:
    if bundle is None:
        return None
    return bundle.get(key)


def describe_parameter(
    operation: Operation, parameter: Parameter, bundle: TextBundle | None,
) -> dict[str, Any]:
    descriptor: dict[str, Any] = {"name": parameter.name}
    description = _describe(bundle, f"{operation.name}_{parameter.name}")
    if description is not None:
        descriptor["description"] = description
    descriptor["type"] = parameter.type_label.value
    return descriptor


def describe_operation(operation: Operation, bundle: TextBundle | None) -> dict[str, Any]:
    descriptor: dict[str, Any] = {"name": operation.name}
    description = _describe(bundle, operation.name)
    if description is not None:
        descriptor["description"] = description
    descriptor["parameters"] = [
        describe_parameter(operation, p, bundle) for p in operation.parameters
    ]
    if operation.returns is not None:
        descriptor["returns"] = operation.returns.value
    return descriptor


def build_descriptors(
    registry: OperationRegistry, bundle: TextBundle | None = None,
) -> list[dict[str, Any]]:
    """Descriptor list for every registered operation, sorted by name."""
    operations = sorted(registry.operations(), key=lambda op: op.name)
    return [describe_operation(op, bundle) for op in operations]
