"""
algorithms/gmac.py

GMAC: GCM authentication of the message as associated data with an empty
plaintext. Needs SET_CIPHER (a "-gcm" cipher), SET_KEY and SET_IV before
init. A running GCM computation cannot be cloned, so copy is refused while
streaming.
"""

from config import GCM_MAX_IV, GCM_MIN_IV, GMAC_TAG_SIZE
from core.algorithm import CipherMac
from core.controls import Command
from core.descriptor import MacDescriptor, SizePolicy
from core.errors import CopyError, InvalidControlValue


class GmacState(CipherMac):
    cipher_mode = "gcm"

    def set_iv(self, iv):
        if not GCM_MIN_IV <= len(iv) <= GCM_MAX_IV:
            raise InvalidControlValue(f"gmac IV must be {GCM_MIN_IV}..{GCM_MAX_IV} bytes, got {len(iv)}")
        self.adapter.set_iv(iv)

    def copy_from(self, other):
        if other.adapter.running:
            raise CopyError("gmac cannot be duplicated mid-stream")
        super().copy_from(other)


GMAC = MacDescriptor(
    name="gmac",
    mac_id=1195,
    oid="1.0.9797.3.4",
    impl=GmacState,
    size_policy=SizePolicy.fixed(GMAC_TAG_SIZE),
    controls=frozenset({Command.SET_KEY, Command.SET_IV, Command.SET_CIPHER, Command.SET_ENGINE}),
    description="Galois-mode MAC over an AES-GCM cipher",
)
