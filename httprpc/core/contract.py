"""Service Contract — base class every exposed service derives from.

Invariants:
    - One instance per request; no state survives between requests
    - Operation surface = public functions declared in the concrete class body
    - The invoker assigns `context` before calling any operation

Design Decisions:
    - Properties proxy the SecurityContext so operations read `self.locale`,
      `self.user_name`, `self.is_in_role(...)` without touching transport types
    - list_of / map_of / entry are static, so results can be assembled without
      an instance (tests, templates)
"""

from typing import Any

from httprpc.core.security import RoleSet, SecurityContext


class WebService:
    """Abstract base class for RPC services.

    Subclasses declare operations as ordinary annotated methods::

        class MathService(WebService):
            def add(self, a: Int, b: Int) -> Int:
                return a + b
    """

    context: SecurityContext | None = None

    def _require_context(self) -> SecurityContext:
        if self.context is None:
            raise RuntimeError("Service has no security context assigned.")
        return self.context

    @property
    def locale(self) -> str:
        return self._require_context().locale

    @property
    def user_name(self) -> str | None:
        return self._require_context().username

    @property
    def user_roles(self) -> RoleSet | None:
        return self._require_context().roles

    def is_in_role(self, role: str) -> bool:
        return self._require_context().is_in_role(role)

    @staticmethod
    def list_of(*elements: Any) -> list[Any]:
        """Build a list result: `self.list_of(1, 2, 3)`."""
        return list(elements)

    @staticmethod
    def map_of(*entries: tuple[str, Any]) -> dict[str, Any]:
        """Build a map result from `entry(...)` pairs, keeping their order."""
        return dict(entries)

    @staticmethod
    def entry(key: str, value: Any) -> tuple[str, Any]:
        return key, value
