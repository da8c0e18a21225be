"""Sample contracts used across the test suite."""

from collections.abc import Iterator
from decimal import Decimal
from typing import Any, Optional

from httprpc.core.contract import WebService
from httprpc.core.domain_types import BigDecimal, Byte, Double, Int, Long, Short
from httprpc.core.values import Resource


class Cursor:
    """Stand-in for a DB cursor: iterable rows plus close()."""

    def __init__(self, rows: list[dict[str, Any]], fail_on_close: bool = False):
        self.rows = rows
        self.fail_on_close = fail_on_close
        self.close_calls = 0

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)

    def close(self) -> None:
        self.close_calls += 1
        if self.fail_on_close:
            raise OSError("cursor already gone")


class MathService(WebService):
    """Arithmetic plus a few identity/locale probes."""

    cursors: list[Cursor] = []
    instances: list["MathService"] = []

    def __init__(self):
        MathService.instances.append(self)

    def add(self, a: Int, b: Int) -> Int:
        return a + b

    def sum(self, values: list[Int]) -> Long:
        return sum(values)

    def average(self, values: list[Double]) -> Optional[Double]:
        if not values:
            return None
        return sum(values) / len(values)

    def scale(self, value: BigDecimal, factor: Short = 1) -> Decimal:
        if value is None:
            return None
        return value * (factor if factor is not None else 1)

    def clamp(self, value: Byte) -> Int:
        return value

    def negate(self, flag: bool) -> bool:
        return not flag

    def echo(self, text: str) -> str:
        return text

    def ping(self) -> None:
        return None

    def fail(self) -> str:
        raise RuntimeError("database password is hunter2")

    def whoami(self) -> dict[str, Any]:
        return {
            "user": self.user_name,
            "admin": self.is_in_role("admin"),
            "locale": self.locale,
        }

    def rows(self, count: Int = 2) -> list[dict[str, Any]]:
        cursor = Cursor([{"id": i, "label": f"row {i}"} for i in range(count or 0)])
        MathService.cursors.append(cursor)
        return Resource(iter(cursor), cursor)

    def broken_rows(self) -> list[dict[str, Any]]:
        cursor = Cursor([{"id": 1}], fail_on_close=True)
        MathService.cursors.append(cursor)
        return Resource(iter(cursor), cursor)

    def bad_keys(self) -> dict[str, Any]:
        return {1: "one"}

    def _helper(self) -> int:
        return 42


class AdvancedMathService(MathService):
    """Inherits MathService operations without re-exposing them."""

    def multiply(self, a: Int, b: Int) -> Int:
        return a * b


class CaseService(WebService):
    def Add(self, a: Int, b: Int) -> Int:
        return a + b


class LegacyService(WebService):
    """Declares a parameter type with no wire coercion."""

    def schedule(self, when: complex) -> str:
        return str(when)

    def hello(self, name: str) -> str:
        return f"hello {name}"


class BrokenConstructorService(WebService):
    def __init__(self):
        raise RuntimeError("no connection pool")

    def noop(self) -> None:
        pass


class NotAService:
    def add(self, a: int, b: int) -> int:
        return a + b


class StreamService(WebService):
    """Results whose work happens while they are being encoded."""

    cursors: list[Cursor] = []

    def count(self, n: Int) -> Iterator[Int]:
        yield from range(n)

    def stream(self, n: Int) -> Iterator[Int]:
        yield from range(n)
        raise RuntimeError("db connection dropped")

    def cursor_rows(self) -> Resource[list[dict[str, Any]]]:
        cursor = Cursor([{"id": 1}, {"id": 2}])
        StreamService.cursors.append(cursor)
        return Resource(self._failing_rows(cursor), cursor)

    def touch(self) -> None:
        cursor = Cursor([])
        StreamService.cursors.append(cursor)
        return Resource([1], cursor)

    def broken_touch(self) -> None:
        cursor = Cursor([], fail_on_close=True)
        StreamService.cursors.append(cursor)
        return Resource([1], cursor)

    def raw(self) -> Resource:
        return Resource([], lambda: None)

    @staticmethod
    def _failing_rows(cursor: Cursor) -> Iterator[dict[str, Any]]:
        yield from cursor
        raise OSError("cursor reset by peer")
