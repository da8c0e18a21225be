"""Resource wrapper — release semantics."""

import pytest

from httprpc.core.values import Resource


class Handle:
    def __init__(self):
        self.closed = 0

    def close(self):
        self.closed += 1


def test_accepts_object_with_close():
    handle = Handle()
    resource = Resource([1], handle)
    resource.close()
    resource.close()
    assert handle.closed == 1
    assert resource.closed


def test_context_manager_releases():
    handle = Handle()
    with Resource([1], handle.close) as resource:
        assert not resource.closed
    assert handle.closed == 1


def test_release_marks_closed_even_when_it_fails():
    def boom():
        raise OSError("gone")

    resource = Resource([], boom)
    with pytest.raises(OSError):
        resource.close()
    resource.close()
    assert resource.closed


def test_rejects_unreleasable_handle():
    with pytest.raises(TypeError):
        Resource([], 42)
