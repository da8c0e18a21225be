"""Invoker — runs one operation on a fresh service instance under its SecurityContext.

Invariants:
    - One new contract instance per call; nothing is pooled or reused
    - Any exception from the operation body becomes InternalOperationError,
      with the original kept as __cause__ and logged, never echoed to the caller
    - Arguments are passed positionally in declared parameter order

Design Decisions:
    - Service construction failures are internal faults too: the contract
      author's __init__ is part of the operation surface from the caller's view
"""

import logging
from dataclasses import dataclass
from typing import Any

from httprpc.core.contract import WebService
from httprpc.core.errors import ErrorContext, InternalOperationError
from httprpc.core.operations import Operation
from httprpc.core.security import SecurityContext
from httprpc.core.type_labels import label_of_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of a successful invocation."""
    operation: Operation
    value: Any

    @property
    def has_body(self) -> bool:
        return self.operation.has_return_value


class Invoker:
    """Instantiates the contract per request and calls the resolved operation."""

    def __init__(self, contract: type[WebService]):
        self._contract = contract

    def new_service(self, context: SecurityContext) -> WebService:
        service = self._contract()
        service.context = context
        return service

    def invoke(
        self, operation: Operation, arguments: list[Any], context: SecurityContext,
    ) -> InvocationResult:
        try:
            service = self.new_service(context)
            value = operation.handler(service, *arguments)
        except Exception as e:
            logger.error(
                f"Operation '{operation.name}' failed: {e}",
                exc_info=True,
                extra={"operation": operation.name, "user": context.username},
            )
            raise InternalOperationError(
                operation.name, ErrorContext(operation=operation.name),
            ) from e
        if operation.has_return_value:
            logger.debug(
                f"Operation '{operation.name}' returned {label_of_value(value).value}",
                extra={"operation": operation.name},
            )
        return InvocationResult(operation, value)
