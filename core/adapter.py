"""
core/adapter.py

Underlying-context adapters: lifetime-managed handles to a digest, keyed
block-cipher or cSHAKE computation owned by exactly one MAC state.

Only algorithm implementations talk to adapters. The surface is narrow:
bind(primitive) / reset() / feed(data) / finish() / duplicate() / release().
An adapter never interprets MAC-level controls.
"""

import logging
from typing import Optional

from core.crypto_utils import retain, wipe
from core.errors import ComputationError, InvalidControlValue
from core.providers import CipherSpec, DigestSpec, Engine, Handle, XofSpec, get_engine

log = logging.getLogger("core.adapter")


class ComputationAdapter:
    spec_type = None

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()
        self.primitive = None
        self._handle: Optional[Handle] = None

    def bind(self, primitive, engine: Optional[Engine] = None) -> None:
        """Select the underlying primitive; drops any running computation."""
        if not isinstance(primitive, self.spec_type):
            raise InvalidControlValue(
                f"{type(self).__name__} cannot bind {type(primitive).__name__}")
        self.release()
        self.primitive = primitive
        if engine is not None:
            self.engine = engine
        log.debug("%s bound to %s via %s", type(self).__name__, primitive.name, self.engine.name)

    @property
    def bound(self) -> bool:
        return self.primitive is not None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def reset(self) -> None:
        """Start a fresh computation on the bound primitive."""
        if self.primitive is None:
            raise ComputationError(f"{type(self).__name__} has no primitive bound")
        self._handle = self._open()

    def feed(self, data: bytes) -> None:
        if self._handle is None:
            raise ComputationError(f"{type(self).__name__} is not running")
        self._handle.update(data)

    def finish(self, length: Optional[int] = None) -> bytes:
        if self._handle is None:
            raise ComputationError(f"{type(self).__name__} is not running")
        handle, self._handle = self._handle, None
        return handle.finalize(length)

    def duplicate(self) -> "ComputationAdapter":
        """Deep copy: the clone shares nothing mutable with this adapter."""
        clone = type(self)(self.engine)
        clone.primitive = self.primitive
        self._copy_params(clone)
        if self._handle is not None:
            clone._handle = self._handle.copy()
        return clone

    def release(self) -> None:
        self._handle = None

    def _open(self) -> Handle:
        raise NotImplementedError()

    def _copy_params(self, clone) -> None:
        pass


class DigestAdapter(ComputationAdapter):
    """A running hash."""

    spec_type = DigestSpec

    def _open(self):
        return self.engine.new_digest(self.primitive)


class CipherAdapter(ComputationAdapter):
    """A keyed block-cipher computation (CMAC over CBC, or GCM authentication)."""

    spec_type = CipherSpec

    def __init__(self, engine: Optional[Engine] = None):
        super().__init__(engine)
        self._key: Optional[bytearray] = None
        self._iv: Optional[bytearray] = None

    @property
    def keyed(self) -> bool:
        return self._key is not None

    def bind(self, primitive, engine=None):
        super().bind(primitive, engine)
        self._forget()

    def rekey(self, key: bytes, iv: Optional[bytes] = None) -> None:
        if self.primitive is None:
            raise InvalidControlValue("the cipher must be set before the key")
        if len(key) != self.primitive.key_size:
            raise InvalidControlValue(
                f"{self.primitive.name} needs a {self.primitive.key_size}-byte key, got {len(key)}")
        self.release()
        wipe(self._key)
        self._key = retain(key)
        if iv is not None:
            self.set_iv(iv)

    def set_iv(self, iv: bytes) -> None:
        self.release()
        wipe(self._iv)
        self._iv = retain(iv)

    def _open(self):
        if self._key is None:
            raise ComputationError(f"{self.primitive.name} key not set")
        if self.primitive.mode == "gcm":
            if self._iv is None:
                raise ComputationError(f"{self.primitive.name} needs an IV")
            return self.engine.new_gcm(self.primitive, bytes(self._key), bytes(self._iv))
        return self.engine.new_cmac(self.primitive, bytes(self._key))

    def _copy_params(self, clone):
        clone._key = None if self._key is None else retain(self._key)
        clone._iv = None if self._iv is None else retain(self._iv)

    def _forget(self):
        wipe(self._key)
        wipe(self._iv)
        self._key = self._iv = None

    def destroy(self) -> None:
        self.release()
        self._forget()


class XofAdapter(ComputationAdapter):
    """A cSHAKE computation with a function name and customization string."""

    spec_type = XofSpec

    def __init__(self, engine: Optional[Engine] = None):
        super().__init__(engine or get_engine("pycryptodome"))
        self.function = b""
        self.custom = b""

    def personalize(self, function: bytes, custom: bytes) -> None:
        self.release()
        self.function = bytes(function)
        self.custom = bytes(custom)

    def _open(self):
        return self.engine.new_cshake(self.primitive, self.function, self.custom)

    def _copy_params(self, clone):
        clone.function = self.function
        clone.custom = self.custom
