"""
Capability model of storage drivers.

A driver declares which groups of operations it supports.  Callers ask
for a capability, never for a backend type::

    if has_capability(driver, Capability.ATOMIC):
        driver.rename("/a.txt", "/b.txt")
    else:
        ...
"""
from enum import Enum
from typing import Any
from typing import FrozenSet
from typing import Protocol
from typing import runtime_checkable


class Capability(Enum):
    READER = "reader"
    WRITER = "writer"
    ATOMIC = "atomic"


@runtime_checkable
class ReaderCapable(Protocol):
    def list(self, path: str) -> Any: ...

    def get(self, path: str) -> Any: ...

    def get_info(self, path: str) -> Any: ...

    def stat(self, path: str) -> Any: ...

    def exists(self, path: str) -> bool: ...


@runtime_checkable
class WriterCapable(Protocol):
    def put(self, path: str, data: Any, content_type=None) -> Any: ...

    def mkdir(self, path: str) -> Any: ...

    def remove(self, path: str) -> Any: ...

    def batch_delete(self, paths) -> Any: ...


@runtime_checkable
class AtomicCapable(Protocol):
    def rename(self, old_path: str, new_path: str) -> Any: ...

    def move(self, source_path: str, target_path: str) -> Any: ...

    def copy(self, source_path: str, target_path: str) -> Any: ...


_protocols = {
    Capability.READER: ReaderCapable,
    Capability.WRITER: WriterCapable,
    Capability.ATOMIC: AtomicCapable,
}


def has_capability(driver: Any, capability: Capability) -> bool:
    """
    True if the driver declares the capability and actually has the
    methods belonging to it.
    """
    declared: FrozenSet[Capability] = getattr(driver, "capabilities", frozenset())
    return capability in declared and isinstance(driver, _protocols[capability])
