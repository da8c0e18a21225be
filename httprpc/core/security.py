"""Security Context — per-request locale, identity and role-membership predicate.

Invariants:
    - Built fresh for every request and owned by that request's invocation only
    - Anonymous requests have username None and no role predicate
    - RoleSet answers membership only; len()/iteration raise UnsupportedOperationError

Design Decisions:
    - Roles as a predicate, not a collection: the transport can only answer
      "is the caller in role X", it cannot list roles
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from httprpc.core.errors import UnsupportedOperationError

RolePredicate = Callable[[str], bool]


class RoleSet:
    """Membership-only view over the transport's role check."""

    def __init__(self, predicate: RolePredicate):
        self._predicate = predicate

    def __contains__(self, role: object) -> bool:
        return bool(self._predicate(str(role)))

    def __iter__(self) -> Iterator[str]:
        raise UnsupportedOperationError("User roles cannot be enumerated.")

    def __len__(self) -> int:
        raise UnsupportedOperationError("User roles cannot be counted.")

    def __repr__(self) -> str:
        return "RoleSet(<predicate>)"


@dataclass(frozen=True)
class SecurityContext:
    """Locale and caller identity for one request."""
    locale: str
    username: str | None = None
    roles: RoleSet | None = None

    @classmethod
    def for_caller(
        cls, locale: str, username: str | None = None,
        is_in_role: RolePredicate | None = None,
    ) -> "SecurityContext":
        """Anonymous unless the transport supplied an identity."""
        if username is None:
            return cls(locale=locale)
        predicate = is_in_role or (lambda role: False)
        return cls(locale=locale, username=username, roles=RoleSet(predicate))

    @property
    def authenticated(self) -> bool:
        return self.username is not None

    def is_in_role(self, role: str) -> bool:
        if self.roles is None:
            return False
        return role in self.roles
