"""
algorithms/hmac.py

HMAC (RFC 2104) over any non-XOF digest from the provider table.

The keyed inner and outer prefixes are hashed once when the key is set and
kept as running digests; every init forks the inner prefix and every final
forks the outer one, so one key serves any number of messages.

Controls: SET_MD and SET_ENGINE before SET_KEY. SET_FLAGS is stored and may
also be changed while streaming.
"""

from typing import Optional

from core.adapter import DigestAdapter
from core.algorithm import HashMac
from core.controls import Command
from core.crypto_utils import wipe
from core.descriptor import MacDescriptor, SizePolicy
from core.errors import ComputationError

IPAD = 0x36
OPAD = 0x5C


class HmacState(HashMac):
    def __init__(self, descriptor):
        super().__init__(descriptor)
        self.flags = 0
        self._inner: Optional[DigestAdapter] = None
        self._outer: Optional[DigestAdapter] = None
        self._work: Optional[DigestAdapter] = None

    def set_flags(self, flags):
        self.flags = flags

    def set_key(self, key):
        super().set_key(key)
        self._derive()

    def primitive_changed(self):
        self._derive()

    def _derive(self):
        self._drop()
        if self._key is None or self.digest is None:
            return
        block = self.digest.block_size
        k = bytearray(self._key)
        if len(k) > block:
            h = self.new_digest()
            h.feed(bytes(k))
            wipe(k)
            k = bytearray(h.finish())
        k.extend(bytes(block - len(k)))
        pad = bytearray(block)
        for attr, value in (("_inner", IPAD), ("_outer", OPAD)):
            for i in range(block):
                pad[i] = k[i] ^ value
            adapter = self.new_digest()
            adapter.feed(bytes(pad))
            setattr(self, attr, adapter)
        wipe(pad)
        wipe(k)

    def _drop(self):
        for name in ("_inner", "_outer", "_work"):
            adapter = getattr(self, name)
            if adapter is not None:
                adapter.release()
            setattr(self, name, None)

    def init(self):
        if self._inner is None:
            raise ComputationError("hmac key not set" if self.digest else "hmac digest not set")
        if self._work is not None:
            self._work.release()
        self._work = self._inner.duplicate()

    def update(self, data):
        self._work.feed(data)

    def final(self):
        inner = self._work.finish()
        self._work = None
        outer = self._outer.duplicate()
        outer.feed(inner)
        return outer.finish()

    def copy_from(self, other):
        super().copy_from(other)
        self._drop()
        self.flags = other.flags
        for name in ("_inner", "_outer", "_work"):
            adapter = getattr(other, name)
            setattr(self, name, None if adapter is None else adapter.duplicate())

    def destroy(self):
        super().destroy()
        self._drop()


HMAC = MacDescriptor(
    name="hmac",
    mac_id=855,
    impl=HmacState,
    size_policy=SizePolicy.delegated(),
    controls=frozenset({Command.SET_KEY, Command.SET_MD, Command.SET_ENGINE, Command.SET_FLAGS}),
    runtime_controls=frozenset({Command.SET_FLAGS}),
    description="hash-based MAC over a selectable digest",
)
