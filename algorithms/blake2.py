"""
algorithms/blake2.py

Keyed BLAKE2b / BLAKE2s (RFC 7693) using the digest's own keyed mode.

SET_CUSTOM sets the personalization string and SET_IV the salt; SET_SIZE
picks the digest length (BLAKE2 bakes it into the parameter block, so
different sizes give unrelated outputs, not truncations).
"""

import hashlib
from typing import Optional

from config import (BLAKE2B_DEFAULT_SIZE, BLAKE2B_MAX_KEY, BLAKE2B_MAX_PERSON, BLAKE2B_MAX_SALT,
                    BLAKE2S_DEFAULT_SIZE, BLAKE2S_MAX_KEY, BLAKE2S_MAX_PERSON, BLAKE2S_MAX_SALT)
from core.algorithm import KeyedMac
from core.controls import Command
from core.crypto_utils import retain, wipe
from core.descriptor import MacDescriptor, SizePolicy
from core.errors import InvalidControlValue


class Blake2State(KeyedMac):
    factory = None
    max_key = 0
    max_salt = 0
    max_person = 0

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self.salt: Optional[bytearray] = None
        self.person: Optional[bytearray] = None
        self._hash = None

    def check_key(self, key):
        if not 1 <= len(key) <= self.max_key:
            raise InvalidControlValue(f"{self.descriptor.name} key must be 1..{self.max_key} bytes, got {len(key)}")

    def set_iv(self, iv):
        if len(iv) > self.max_salt:
            raise InvalidControlValue(f"{self.descriptor.name} salt exceeds {self.max_salt} bytes")
        wipe(self.salt)
        self.salt = retain(iv)

    def set_custom(self, custom):
        if len(custom) > self.max_person:
            raise InvalidControlValue(f"{self.descriptor.name} personalization exceeds {self.max_person} bytes")
        wipe(self.person)
        self.person = retain(custom)

    def init(self):
        key = self.require_key()
        self._hash = type(self).factory(
            digest_size=self.size(),
            key=key,
            salt=bytes(self.salt or b""),
            person=bytes(self.person or b""),
        )

    def update(self, data):
        self._hash.update(data)

    def final(self):
        h, self._hash = self._hash, None
        return h.digest()

    def copy_from(self, other):
        super().copy_from(other)
        self.salt = None if other.salt is None else retain(other.salt)
        self.person = None if other.person is None else retain(other.person)
        self._hash = None if other._hash is None else other._hash.copy()

    def destroy(self):
        super().destroy()
        wipe(self.salt)
        wipe(self.person)
        self.salt = self.person = self._hash = None


class Blake2bState(Blake2State):
    factory = hashlib.blake2b
    max_key = BLAKE2B_MAX_KEY
    max_salt = BLAKE2B_MAX_SALT
    max_person = BLAKE2B_MAX_PERSON


class Blake2sState(Blake2State):
    factory = hashlib.blake2s
    max_key = BLAKE2S_MAX_KEY
    max_salt = BLAKE2S_MAX_SALT
    max_person = BLAKE2S_MAX_PERSON


_CONTROLS = frozenset({Command.SET_KEY, Command.SET_CUSTOM, Command.SET_IV, Command.SET_SIZE})

BLAKE2BMAC = MacDescriptor(
    name="blake2bmac",
    mac_id=1201,
    oid="1.3.6.1.4.1.1722.12.2.1",
    impl=Blake2bState,
    size_policy=SizePolicy.bounded(BLAKE2B_DEFAULT_SIZE, 1, 64),
    controls=_CONTROLS,
    description="keyed BLAKE2b",
)

BLAKE2SMAC = MacDescriptor(
    name="blake2smac",
    mac_id=1202,
    oid="1.3.6.1.4.1.1722.12.2.2",
    impl=Blake2sState,
    size_policy=SizePolicy.bounded(BLAKE2S_DEFAULT_SIZE, 1, 32),
    controls=_CONTROLS,
    description="keyed BLAKE2s",
)
