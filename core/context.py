"""
core/context.py

MacContext: one configured or in-progress MAC computation bound to a single
descriptor for its whole life.

Phases:
    CONFIGURED --init--> STREAMING --final--> FINALIZED --init--> STREAMING ...
    any phase --free--> DESTROYED

A context is single-owner: callers serialize every call on one context; there
is no internal locking. ``copy`` forks a context (same descriptor) into a
fully independent one, e.g. to finish many suffixes after one shared prefix.
"""

import logging
from enum import Enum
from typing import Any, Iterable, Optional, Union

from core.controls import (Command, Control, UNSET, as_command, make_control, parse_control,
                           parse_hex_control)
from core.descriptor import MacDescriptor
from core.errors import (ComputationError, ControlAfterInit, CopyError, NotInitialized,
                         UnsupportedControl)
from core.registry import Registry, default_registry

log = logging.getLogger("core.context")


class Phase(Enum):
    CONFIGURED = "configured"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    DESTROYED = "destroyed"


# configuration that is only accepted outside a running computation unless a
# descriptor lists it in runtime_controls
INIT_ONLY_CONTROLS = frozenset({
    Command.SET_KEY, Command.SET_IV, Command.SET_CUSTOM, Command.SET_XOF, Command.SET_SIZE,
    Command.SET_MD, Command.SET_CIPHER, Command.SET_ENGINE,
})


class MacContext:
    def __init__(self, descriptor: MacDescriptor):
        self._descriptor = descriptor
        self._state = descriptor.create()
        self._phase = Phase.CONFIGURED
        log.debug("created %s context", descriptor.name)

    @classmethod
    def from_id(cls, mac_id: int, registry: Optional[Registry] = None) -> "MacContext":
        return cls((default_registry() if registry is None else registry).lookup_by_id(mac_id))

    @classmethod
    def from_name(cls, name: str, registry: Optional[Registry] = None) -> "MacContext":
        return cls((default_registry() if registry is None else registry).lookup_by_name(name))

    @property
    def descriptor(self) -> MacDescriptor:
        return self._descriptor

    @property
    def phase(self) -> Phase:
        return self._phase

    def _live(self):
        if self._phase is Phase.DESTROYED:
            raise NotInitialized(f"{self._descriptor.name} context has been freed")
        return self._state

    def size(self) -> int:
        """Output length in bytes, 0 while it cannot be determined yet."""
        return self._descriptor.size(self._live())

    # -------------------
    # Controls
    # -------------------
    def control(self, command: Union[Control, Command, int, str], value: Any = UNSET) -> None:
        ctl = command if isinstance(command, Control) else make_control(command, value)
        self._dispatch(ctl)

    def control_list(self, controls: Iterable[Control]) -> None:
        for ctl in controls:
            self._dispatch(ctl)

    def control_str(self, type_str: str, value_str: str) -> None:
        self._dispatch(parse_control(type_str, value_str))

    def control_hex(self, command: Union[Command, int, str], hex_str: str) -> None:
        self._dispatch(parse_hex_control(command, hex_str))

    def try_control(self, command: Union[Control, Command, int, str], value: Any = UNSET) -> bool:
        """Apply a control; False when the algorithm does not implement it."""
        try:
            self.control(command, value)
        except UnsupportedControl as exc:
            log.debug("%s: skipped control: %s", self._descriptor.name, exc)
            return False
        return True

    def _dispatch(self, ctl: Control) -> None:
        state = self._live()
        if (self._phase is Phase.STREAMING and ctl.command in INIT_ONLY_CONTROLS
                and ctl.command not in self._descriptor.runtime_controls):
            if not self._descriptor.supports(ctl.command):
                raise UnsupportedControl(f"{self._descriptor.name} does not implement {ctl.command.name}")
            raise ControlAfterInit(f"{ctl.command.name} is not accepted while {self._descriptor.name} is streaming")
        self._descriptor.configure(state, ctl)
        log.debug("%s: applied %r", self._descriptor.name, ctl)

    def supports(self, command: Union[Command, int, str]) -> bool:
        return self._descriptor.supports(as_command(command))

    # -------------------
    # Streaming engine
    # -------------------
    def init(self) -> None:
        """Start a computation; from FINALIZED this resets and reuses the configuration."""
        state = self._live()
        self._descriptor.init(state)
        self._phase = Phase.STREAMING
        log.debug("%s: streaming", self._descriptor.name)

    def update(self, data: bytes) -> None:
        if self._phase is not Phase.STREAMING:
            raise NotInitialized(f"update on a {self._phase.value} {self._descriptor.name} context")
        self._descriptor.update(self._state, memoryview(data).tobytes())

    def final(self, out=None) -> int:
        """Finish the computation.

        With no buffer, return the exact number of bytes the real call will
        write, leaving the stream untouched. With a writable buffer, write
        the MAC into its start and return the number of bytes written.
        """
        if self._phase is not Phase.STREAMING:
            raise NotInitialized(f"final on a {self._phase.value} {self._descriptor.name} context")
        needed = self._descriptor.size(self._state)
        if out is None:
            return needed
        view = memoryview(out)
        if view.readonly:
            raise ComputationError("output buffer is read-only")
        if view.nbytes < needed:
            raise ComputationError(f"output buffer holds {view.nbytes} bytes, {needed} needed")
        tag = self._descriptor.final(self._state)
        self._phase = Phase.FINALIZED
        view.cast("B")[:len(tag)] = tag
        log.debug("%s: finalized %d bytes", self._descriptor.name, len(tag))
        return len(tag)

    def finalize(self) -> bytes:
        buf = bytearray(self.final())
        written = self.final(buf)
        return bytes(buf[:written])

    # -------------------
    # Lifecycle
    # -------------------
    def copy_from(self, src: "MacContext") -> None:
        """Make this context an independent duplicate of ``src``.

        Both must be bound to the same descriptor. On failure this context is
        left exactly as it was.
        """
        self._live()
        if src._descriptor != self._descriptor:
            raise CopyError(f"cannot copy a {src._descriptor.name} context into a {self._descriptor.name} one")
        if src._phase not in (Phase.CONFIGURED, Phase.STREAMING):
            raise CopyError(f"cannot copy a {src._phase.value} context")
        fresh = self._descriptor.create()
        try:
            self._descriptor.duplicate(fresh, src._state)
        except Exception:
            self._descriptor.destroy(fresh)
            raise
        self._descriptor.destroy(self._state)
        self._state = fresh
        self._phase = src._phase

    def copy(self) -> "MacContext":
        dest = MacContext(self._descriptor)
        try:
            dest.copy_from(self)
        except Exception:
            dest.free()
            raise
        return dest

    def free(self) -> None:
        if self._phase is Phase.DESTROYED:
            return
        self._descriptor.destroy(self._state)
        self._state = None
        self._phase = Phase.DESTROYED
        log.debug("freed %s context", self._descriptor.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.free()

    def __repr__(self):
        return f"<MacContext {self._descriptor.name} {self._phase.value}>"
