"""
core/descriptor.py

Algorithm descriptors: immutable metadata plus the operation table for one
MAC algorithm. The operation table is the algorithm's state class (a
``core.algorithm.MacAlgorithm`` subclass); the descriptor's methods are the
callbacks a context dispatches through.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Type

from core.controls import Command, Control
from core.errors import AllocationError, InvalidControlValue, UnsupportedControl


class SizeKind(Enum):
    FIXED = "fixed"          # one output length
    DELEGATED = "delegated"  # the underlying primitive decides
    BOUNDED = "bounded"      # configurable within [minimum, maximum]
    UNBOUNDED = "unbounded"  # XOF style, any length up to maximum


@dataclass(frozen=True)
class SizePolicy:
    kind: SizeKind
    default: int = 0
    minimum: int = 1
    maximum: Optional[int] = None

    @classmethod
    def fixed(cls, size: int) -> "SizePolicy":
        return cls(SizeKind.FIXED, size, size, size)

    @classmethod
    def delegated(cls) -> "SizePolicy":
        return cls(SizeKind.DELEGATED)

    @classmethod
    def bounded(cls, default: int, minimum: int, maximum: int) -> "SizePolicy":
        return cls(SizeKind.BOUNDED, default, minimum, maximum)

    @classmethod
    def unbounded(cls, default: int, maximum: Optional[int] = None) -> "SizePolicy":
        return cls(SizeKind.UNBOUNDED, default, 1, maximum)

    def check(self, size: int) -> int:
        if self.kind is SizeKind.DELEGATED:
            raise UnsupportedControl("output size follows the underlying primitive")
        if size < self.minimum or (self.maximum is not None and size > self.maximum):
            if self.kind is SizeKind.FIXED:
                raise InvalidControlValue(f"output size is fixed at {self.default} bytes")
            upper = "" if self.maximum is None else f"..{self.maximum}"
            raise InvalidControlValue(f"output size {size} outside {self.minimum}{upper}")
        return size


@dataclass(frozen=True)
class MacDescriptor:
    name: str
    mac_id: int
    impl: Type
    size_policy: SizePolicy
    controls: FrozenSet[Command]
    oid: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    # controls still accepted while a computation is streaming
    runtime_controls: FrozenSet[Command] = frozenset()
    description: str = field(default="", compare=False)

    def supports(self, command: Command) -> bool:
        return command in self.controls

    # -------------------
    # Operation table
    # -------------------
    def create(self):
        try:
            return self.impl(self)
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate {self.name} state") from exc

    def destroy(self, state) -> None:
        if state is not None:
            state.destroy()

    def duplicate(self, dest, src) -> None:
        dest.copy_from(src)

    def configure(self, state, control: Control) -> None:
        if control.command not in self.controls:
            raise UnsupportedControl(f"{self.name} does not implement {control.command.name}")
        state.configure(control)

    def init(self, state) -> None:
        state.init()

    def update(self, state, data: bytes) -> None:
        state.update(data)

    def final(self, state) -> bytes:
        return state.final()

    def size(self, state) -> int:
        return state.size()

    def __repr__(self):
        return f"<MacDescriptor {self.name} id={self.mac_id}>"
