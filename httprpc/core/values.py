"""Value Model — the container graph accepted by the result encoder.

Invariants:
    - Null/String/Number/Boolean/List/Map map onto None/str/int|float|Decimal/bool/
      list|tuple|iterator/Mapping; no wrapper objects for plain values
    - Map keys are always str (violations are encoding errors, never coerced)
    - Resource.close() releases the wrapped handle at most once

Design Decisions:
    - Native containers over a tagged class hierarchy: operations return plain
      Python data and the encoder dispatches on isinstance
    - Resource is the one explicit wrapper: it pairs a value with a release
      callable so the encoder can scope cleanup to a single encode call
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Resource(Generic[T]):
    """A value backed by an externally owned handle that must be released.

    `value` is encoded like any other value (typically a list, mapping, or a
    lazy iterator over the handle). `release` is either a zero-argument
    callable or an object exposing close().

    Annotate operations as `Resource[T]` so descriptors label the wrapped type.
    """

    def __init__(self, value: T, release: Callable[[], Any] | Any):
        self.value = value
        if callable(release):
            self._release = release
        elif hasattr(release, "close"):
            self._release = release.close
        else:
            raise TypeError("release must be callable or expose close()")
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the handle. Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._release()

    def __enter__(self) -> "Resource[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Resource({self.value!r}, {state})"
