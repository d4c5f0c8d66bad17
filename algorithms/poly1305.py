"""
algorithms/poly1305.py

Poly1305 one-time authenticator (RFC 8439) keyed directly with 32 bytes.
The running computation cannot be cloned; copy works only outside a stream.
"""

from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import poly1305

from config import POLY1305_KEY_SIZE, POLY1305_TAG_SIZE
from core.algorithm import KeyedMac
from core.controls import Command
from core.descriptor import MacDescriptor, SizePolicy
from core.errors import ComputationError, CopyError, InvalidControlValue


class Poly1305State(KeyedMac):
    def __init__(self, descriptor):
        super().__init__(descriptor)
        self._mac: Optional[poly1305.Poly1305] = None

    def check_key(self, key):
        if len(key) != POLY1305_KEY_SIZE:
            raise InvalidControlValue(f"poly1305 needs a {POLY1305_KEY_SIZE}-byte key, got {len(key)}")

    def init(self):
        key = self.require_key()
        try:
            self._mac = poly1305.Poly1305(key)
        except UnsupportedAlgorithm as exc:
            raise ComputationError(f"poly1305 unavailable: {exc}") from exc

    def update(self, data):
        self._mac.update(data)

    def final(self):
        mac, self._mac = self._mac, None
        return mac.finalize()

    def copy_from(self, other):
        if other._mac is not None:
            raise CopyError("poly1305 cannot be duplicated mid-stream")
        super().copy_from(other)

    def destroy(self):
        super().destroy()
        self._mac = None


POLY1305 = MacDescriptor(
    name="poly1305",
    mac_id=1061,
    impl=Poly1305State,
    size_policy=SizePolicy.fixed(POLY1305_TAG_SIZE),
    controls=frozenset({Command.SET_KEY}),
    description="Poly1305 one-time authenticator",
)
