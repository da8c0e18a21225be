"""Request Dispatcher — resolve → coerce → invoke → encode, or describe.

Invariants:
    - Empty operation name → descriptor list for the caller's locale
    - Unknown name → OperationNotFoundError; no fuzzy matching or case folding
    - Operations without a return value produce no body and no content type;
      a Resource they return anyway is still released
    - Faults raised while a lazy result is encoded are operation faults
      (InternalOperationError), not transport errors
    - Only the registry and bundle source are shared between requests; both are
      read-only after startup
    - Faults propagate as RpcError subclasses; the transport maps them to statuses

Design Decisions:
    - Transport-neutral RpcRequest/RpcResponse dataclasses: the FastAPI route is a
      thin adapter and the dispatcher is testable without HTTP
    - The encoded body is buffered (io.StringIO) before it is returned
    - Operation results go through a pluggable ValueEncoder (JSON by default, or
      a TemplateEncoder); descriptor lists are always JSON
"""

import io
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from httprpc.core.coercion import coerce_arguments
from httprpc.core.domain_types import JSON_MIME_TYPE
from httprpc.core.encoder import ResultEncoder, ValueEncoder
from httprpc.core.errors import (
    EncodingError, ErrorContext, InternalOperationError, RpcError,
)
from httprpc.core.localization import BundleSource, TextBundle
from httprpc.core.security import RolePredicate, SecurityContext
from httprpc.core.values import Resource
from httprpc.services.descriptors import build_descriptors
from httprpc.services.invoker import Invoker
from httprpc.services.registry import OperationRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RpcRequest:
    """What the transport extracted from one HTTP request."""
    operation: str
    parameters: Mapping[str, Sequence[str]] = field(default_factory=dict)
    locale: str = "en"
    username: str | None = None
    is_in_role: RolePredicate | None = None


@dataclass(frozen=True)
class RpcResponse:
    """Body and content type to send back; both None for no-content operations."""
    body: str | None = None
    content_type: str | None = None


class RequestDispatcher:
    """Top-level wiring for one service contract."""

    def __init__(
        self,
        registry: OperationRegistry,
        bundles: BundleSource | None = None,
        encoder: ValueEncoder | None = None,
    ):
        self.registry = registry.freeze()
        self._bundles = bundles
        self._descriptor_encoder = ResultEncoder()
        self._encoder = encoder or self._descriptor_encoder
        self._invoker = Invoker(registry.contract)

    @property
    def contract(self) -> type:
        return self.registry.contract

    def dispatch(self, request: RpcRequest) -> RpcResponse:
        name = request.operation.removeprefix("/")
        try:
            if not name:
                return self._describe(request.locale)
            return self._call(name, request)
        except RpcError as e:
            if e.context.operation is None:
                e.context.operation = name or None
            logger.warning(
                f"Dispatch of '{name}' failed: {e.message}",
                extra={"operation": name, "error_code": e.code},
            )
            raise

    def bundle_for(self, locale: str) -> TextBundle | None:
        if self._bundles is None:
            return None
        return self._bundles.get_bundle(self.contract, locale)

    def _describe(self, locale: str) -> RpcResponse:
        descriptors = build_descriptors(self.registry, self.bundle_for(locale))
        return RpcResponse(
            self._encode(descriptors, self._descriptor_encoder), JSON_MIME_TYPE,
        )

    def _call(self, name: str, request: RpcRequest) -> RpcResponse:
        operation = self.registry.get(name)
        arguments = coerce_arguments(operation.parameters, request.parameters)
        context = SecurityContext.for_caller(
            request.locale, request.username, request.is_in_role,
        )
        logger.debug(
            f"Dispatching '{name}'",
            extra={"operation": name, "locale": request.locale, "user": request.username},
        )
        result = self._invoker.invoke(operation, arguments, context)
        if not result.has_body:
            self._release(result.value)
            return RpcResponse()
        try:
            body = self._encode(result.value, self._encoder)
        except RpcError:
            raise
        except Exception as e:
            # Lazy results (generators, cursors) run the operation body here
            logger.error(
                f"Operation '{name}' failed while its result was encoded: {e}",
                exc_info=True,
                extra={"operation": name, "user": request.username},
            )
            raise InternalOperationError(name, ErrorContext(operation=name)) from e
        return RpcResponse(body, self._encoder.content_type)

    @staticmethod
    def _release(value: Any) -> None:
        """Release a Resource returned by an operation that has no body."""
        if not isinstance(value, Resource):
            return
        try:
            value.close()
        except Exception as e:
            raise EncodingError("Resource release failed.") from e

    @staticmethod
    def _encode(value: Any, encoder: ValueEncoder) -> str:
        buffer = io.StringIO()
        encoder.write(value, buffer)
        return buffer.getvalue()
