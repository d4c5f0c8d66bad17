"""
core/algorithm.py

The capability interface every algorithm module implements, and the four
shapes the built-in algorithms come in:

 - KeyedMac:  keyed directly, computes itself (Poly1305, BLAKE2)
 - HashMac:   delegates to a digest adapter (HMAC)
 - CipherMac: delegates to a keyed block-cipher adapter (CMAC, GMAC)
 - XofMac:    delegates to a cSHAKE adapter with customization and XOF output (KMAC)

A state object is the algorithm-private state of exactly one context. Each
control command maps to one ``set_*`` method; commands an algorithm does not
override raise ``UnsupportedControl``.
"""

from typing import Optional

from core.adapter import CipherAdapter, DigestAdapter, XofAdapter
from core.controls import Control
from core.crypto_utils import retain, wipe
from core.errors import ComputationError, CopyError, InvalidControlValue, UnsupportedControl
from core.descriptor import SizeKind
from core.providers import CipherSpec, DigestSpec, Engine, get_engine, get_xof


class MacAlgorithm:
    def __init__(self, descriptor):
        self.descriptor = descriptor
        self.out_size: Optional[int] = None

    # -------------------
    # Controls
    # -------------------
    def configure(self, control: Control) -> None:
        getattr(self, control.command.name.lower())(control.value)

    def _unsupported(self, what: str):
        raise UnsupportedControl(f"{self.descriptor.name} does not implement {what}")

    def set_key(self, key: bytes):
        self._unsupported("SET_KEY")

    def set_iv(self, iv: bytes):
        self._unsupported("SET_IV")

    def set_custom(self, custom: bytes):
        self._unsupported("SET_CUSTOM")

    def set_xof(self, xof: bool):
        self._unsupported("SET_XOF")

    def set_flags(self, flags: int):
        self._unsupported("SET_FLAGS")

    def set_engine(self, engine: Engine):
        self._unsupported("SET_ENGINE")

    def set_md(self, digest: DigestSpec):
        self._unsupported("SET_MD")

    def set_cipher(self, cipher: CipherSpec):
        self._unsupported("SET_CIPHER")

    def set_size(self, size: int):
        self.out_size = self.descriptor.size_policy.check(size)

    # -------------------
    # Size
    # -------------------
    def natural_size(self) -> int:
        """Output size decided by the underlying primitive, 0 while unknown."""
        return 0

    def size(self) -> int:
        policy = self.descriptor.size_policy
        if policy.kind is SizeKind.DELEGATED:
            return self.natural_size()
        return self.out_size or policy.default

    # -------------------
    # Compute protocol
    # -------------------
    def init(self) -> None:
        raise NotImplementedError()

    def update(self, data: bytes) -> None:
        raise NotImplementedError()

    def final(self) -> bytes:
        raise NotImplementedError()

    def copy_from(self, other: "MacAlgorithm") -> None:
        self.out_size = other.out_size

    def destroy(self) -> None:
        pass


class KeyedMac(MacAlgorithm):
    """An algorithm holding its own key bytes."""

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self._key: Optional[bytearray] = None

    @property
    def keyed(self) -> bool:
        return self._key is not None

    def check_key(self, key: bytes) -> None:
        pass

    def set_key(self, key):
        self.check_key(key)
        wipe(self._key)
        self._key = retain(key)

    def require_key(self) -> bytes:
        if self._key is None:
            raise ComputationError(f"{self.descriptor.name} key not set")
        return bytes(self._key)

    def copy_from(self, other):
        super().copy_from(other)
        wipe(self._key)
        self._key = None if other._key is None else retain(other._key)

    def destroy(self):
        wipe(self._key)
        self._key = None


class HashMac(KeyedMac):
    """Delegates to a digest selected with SET_MD (and optionally SET_ENGINE)."""

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self.engine = get_engine()
        self.digest: Optional[DigestSpec] = None

    def set_md(self, digest):
        if digest.xof:
            raise InvalidControlValue(f"{self.descriptor.name} cannot use extendable-output digest {digest.name}")
        self._switch(self.engine, digest)

    def set_engine(self, engine):
        self._switch(engine, self.digest)

    def _switch(self, engine, digest):
        # reject an unusable pairing before touching the keyed state
        if digest is not None:
            engine.new_digest(digest)
        self.engine = engine
        self.digest = digest
        self.primitive_changed()

    def set_key(self, key):
        if self.digest is None:
            raise InvalidControlValue("the digest must be set before the key")
        super().set_key(key)

    def new_digest(self) -> DigestAdapter:
        adapter = DigestAdapter(self.engine)
        adapter.bind(self.digest)
        adapter.reset()
        return adapter

    def natural_size(self):
        return self.digest.digest_size if self.digest else 0

    def primitive_changed(self) -> None:
        pass

    def copy_from(self, other):
        super().copy_from(other)
        self.engine = other.engine
        self.digest = other.digest


class CipherMac(MacAlgorithm):
    """Delegates to a keyed block-cipher computation selected with SET_CIPHER.

    The key lives in the adapter only, since its length is bound to the
    cipher: selecting another cipher or engine forgets it.
    """

    cipher_mode = None

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self.adapter = CipherAdapter()

    @property
    def keyed(self) -> bool:
        return self.adapter.keyed

    def set_cipher(self, cipher):
        if cipher.mode != self.cipher_mode:
            raise InvalidControlValue(
                f"{self.descriptor.name} needs a {self.cipher_mode} mode cipher, got {cipher.name}")
        self.adapter.bind(cipher)

    def set_engine(self, engine):
        if self.adapter.bound:
            self.adapter.bind(self.adapter.primitive, engine)
        else:
            self.adapter.engine = engine

    def set_key(self, key):
        self.adapter.rekey(key)

    def natural_size(self):
        return self.adapter.primitive.block_size if self.adapter.bound else 0

    def init(self):
        if not self.adapter.keyed:
            raise ComputationError(f"{self.descriptor.name} key not set")
        self.adapter.reset()

    def update(self, data):
        self.adapter.feed(data)

    def final(self):
        return self.adapter.finish()

    def copy_from(self, other):
        clone = other.adapter.duplicate()
        super().copy_from(other)
        self.adapter.destroy()
        self.adapter = clone

    def destroy(self):
        self.adapter.destroy()


class XofMac(KeyedMac):
    """Delegates to a cSHAKE computation; output length and XOF mode are configurable."""

    xof_name = None

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self.adapter = XofAdapter()
        self.adapter.bind(get_xof(self.xof_name))
        self.custom: Optional[bytearray] = None
        self.xof = False

    def set_custom(self, custom):
        wipe(self.custom)
        self.custom = retain(custom)

    def set_xof(self, xof):
        self.xof = xof

    def copy_from(self, other):
        if other.adapter.running:
            raise CopyError(f"{self.descriptor.name} cannot be duplicated mid-stream")
        super().copy_from(other)
        wipe(self.custom)
        self.custom = None if other.custom is None else retain(other.custom)
        self.xof = other.xof

    def destroy(self):
        super().destroy()
        wipe(self.custom)
        self.custom = None
        self.adapter.release()
