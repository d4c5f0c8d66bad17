"""
algorithms/kmac.py

KMAC128 / KMAC256 (NIST SP 800-185) built on a cSHAKE adapter with function
name "KMAC".

    newX = bytepad(encode_string(K), rate) || X || right_encode(L)

With SET_XOF enabled the trailing length is right_encode(0) (KMACXOF), so
the output of any length is a prefix of every longer output.
"""

from config import (KMAC128_DEFAULT_SIZE, KMAC256_DEFAULT_SIZE, KMAC_MAX_CUSTOM, KMAC_MAX_KEY,
                    KMAC_MAX_OUTPUT, KMAC_MIN_KEY)
from core.algorithm import XofMac
from core.controls import Command
from core.descriptor import MacDescriptor, SizePolicy
from core.errors import InvalidControlValue

FUNCTION_NAME = b"KMAC"


def left_encode(x: int) -> bytes:
    n = max(1, (x.bit_length() + 7) // 8)
    return bytes([n]) + x.to_bytes(n, "big")


def right_encode(x: int) -> bytes:
    n = max(1, (x.bit_length() + 7) // 8)
    return x.to_bytes(n, "big") + bytes([n])


def encode_string(s: bytes) -> bytes:
    return left_encode(len(s) * 8) + s


def bytepad(x: bytes, w: int) -> bytes:
    z = left_encode(w) + x
    return z + bytes(-len(z) % w)


class KmacState(XofMac):
    def check_key(self, key):
        if not KMAC_MIN_KEY <= len(key) <= KMAC_MAX_KEY:
            raise InvalidControlValue(
                f"{self.descriptor.name} key must be {KMAC_MIN_KEY}..{KMAC_MAX_KEY} bytes, got {len(key)}")

    def set_custom(self, custom):
        if len(custom) > KMAC_MAX_CUSTOM:
            raise InvalidControlValue(f"{self.descriptor.name} customization exceeds {KMAC_MAX_CUSTOM} bytes")
        super().set_custom(custom)

    def init(self):
        key = self.require_key()
        self.adapter.personalize(FUNCTION_NAME, bytes(self.custom or b""))
        self.adapter.reset()
        self.adapter.feed(bytepad(encode_string(key), self.adapter.primitive.rate))

    def update(self, data):
        self.adapter.feed(data)

    def final(self):
        n = self.size()
        self.adapter.feed(right_encode(0 if self.xof else n * 8))
        return self.adapter.finish(n)


class Kmac128State(KmacState):
    xof_name = "cshake128"


class Kmac256State(KmacState):
    xof_name = "cshake256"


_CONTROLS = frozenset({Command.SET_KEY, Command.SET_CUSTOM, Command.SET_XOF, Command.SET_SIZE})

KMAC128 = MacDescriptor(
    name="kmac128",
    mac_id=1196,
    oid="2.16.840.1.101.3.4.2.19",
    impl=Kmac128State,
    size_policy=SizePolicy.unbounded(KMAC128_DEFAULT_SIZE, KMAC_MAX_OUTPUT),
    controls=_CONTROLS,
    description="KECCAK MAC, 128-bit security",
)

KMAC256 = MacDescriptor(
    name="kmac256",
    mac_id=1197,
    oid="2.16.840.1.101.3.4.2.20",
    impl=Kmac256State,
    size_policy=SizePolicy.unbounded(KMAC256_DEFAULT_SIZE, KMAC_MAX_OUTPUT),
    controls=_CONTROLS,
    description="KECCAK MAC, 256-bit security",
)
