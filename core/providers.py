"""
core/providers.py

Digest and cipher providers consumed by the underlying-context adapters.

A provider is selected in two steps: a primitive spec (what to compute, e.g.
"sha256" or "aes-128-cbc") and an engine (which library computes it). Engines
hand back handles with a uniform update / copy / finalize surface so adapters
never touch library objects directly.

Engines:
 - "openssl": the `cryptography` hazmat primitives (default)
 - "pycryptodome": the `Crypto` package
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import cmac, hashes
from cryptography.hazmat.decrepit.ciphers.algorithms import Camellia
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from Crypto.Cipher import AES
from Crypto.Hash import CMAC, MD5, SHA1, SHA224, SHA256, SHA384, SHA512
from Crypto.Hash import cSHAKE128, cSHAKE256

from config import DEFAULT_ENGINE
from core.errors import ComputationError, CopyError, InvalidControlValue, NotFound

log = logging.getLogger("core.providers")


@dataclass(frozen=True)
class DigestSpec:
    name: str
    digest_size: int
    block_size: int
    xof: bool = False
    aliases: Tuple[str, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class CipherSpec:
    name: str
    family: str
    key_size: int
    block_size: int
    mode: str


@dataclass(frozen=True)
class XofSpec:
    """A customizable extendable-output function (cSHAKE)."""
    name: str
    rate: int


DIGESTS: Dict[str, DigestSpec] = {d.name: d for d in (
    DigestSpec("md5", 16, 64),
    DigestSpec("sha1", 20, 64, aliases=("sha-1",)),
    DigestSpec("sha224", 28, 64, aliases=("sha2-224", "sha-224")),
    DigestSpec("sha256", 32, 64, aliases=("sha2-256", "sha-256")),
    DigestSpec("sha384", 48, 128, aliases=("sha2-384", "sha-384")),
    DigestSpec("sha512", 64, 128, aliases=("sha2-512", "sha-512")),
    DigestSpec("sha512-224", 28, 128, aliases=("sha2-512/224", "sha512/224")),
    DigestSpec("sha512-256", 32, 128, aliases=("sha2-512/256", "sha512/256")),
    DigestSpec("sha3-224", 28, 144),
    DigestSpec("sha3-256", 32, 136),
    DigestSpec("sha3-384", 48, 104),
    DigestSpec("sha3-512", 64, 72),
    DigestSpec("blake2b512", 64, 128, aliases=("blake2b",)),
    DigestSpec("blake2s256", 32, 64, aliases=("blake2s",)),
    DigestSpec("shake128", 16, 168, xof=True),
    DigestSpec("shake256", 32, 136, xof=True),
)}

CIPHERS: Dict[str, CipherSpec] = {c.name: c for c in (
    CipherSpec("aes-128-cbc", "aes", 16, 16, "cbc"),
    CipherSpec("aes-192-cbc", "aes", 24, 16, "cbc"),
    CipherSpec("aes-256-cbc", "aes", 32, 16, "cbc"),
    CipherSpec("camellia-128-cbc", "camellia", 16, 16, "cbc"),
    CipherSpec("camellia-192-cbc", "camellia", 24, 16, "cbc"),
    CipherSpec("camellia-256-cbc", "camellia", 32, 16, "cbc"),
    CipherSpec("aes-128-gcm", "aes", 16, 16, "gcm"),
    CipherSpec("aes-192-gcm", "aes", 24, 16, "gcm"),
    CipherSpec("aes-256-gcm", "aes", 32, 16, "gcm"),
)}

XOFS: Dict[str, XofSpec] = {x.name: x for x in (
    XofSpec("cshake128", 168),
    XofSpec("cshake256", 136),
)}

_DIGEST_ALIASES = {alias: d.name for d in DIGESTS.values() for alias in d.aliases}


def get_digest(name: str) -> DigestSpec:
    key = name.strip().lower()
    spec = DIGESTS.get(_DIGEST_ALIASES.get(key, key))
    if spec is None:
        raise NotFound(f"unknown digest: {name}")
    return spec


def get_cipher(name: str) -> CipherSpec:
    spec = CIPHERS.get(name.strip().lower())
    if spec is None:
        raise NotFound(f"unknown cipher: {name}")
    return spec


def get_xof(name: str) -> XofSpec:
    spec = XOFS.get(name.strip().lower())
    if spec is None:
        raise NotFound(f"unknown xof: {name}")
    return spec


class Handle:
    """Uniform update / copy / finalize surface over one library object."""

    def __init__(self, obj, feed: str = "update", finish: str = "finalize"):
        self._obj = obj
        self._feed = feed
        self._finish = finish

    def update(self, data: bytes) -> None:
        try:
            getattr(self._obj, self._feed)(data)
        except (ValueError, TypeError) as exc:
            raise ComputationError(str(exc)) from exc

    def copy(self) -> "Handle":
        clone = getattr(self._obj, "copy", None)
        if clone is None:
            raise CopyError(f"{type(self._obj).__name__} cannot be duplicated mid-stream")
        return type(self)(clone(), self._feed, self._finish)

    def finalize(self, length: Optional[int] = None) -> bytes:
        finish = getattr(self._obj, self._finish)
        try:
            return finish() if length is None else finish(length)
        except (ValueError, TypeError) as exc:
            raise ComputationError(str(exc)) from exc


class GcmHandle(Handle):
    """cryptography GCM encryptor used for authentication only; the tag is the MAC."""

    def __init__(self, obj, feed: str = "authenticate_additional_data", finish: str = "finalize"):
        super().__init__(obj, feed, finish)

    def finalize(self, length: Optional[int] = None) -> bytes:
        super().finalize()
        return self._obj.tag


class Engine:
    """An execution provider for the underlying primitives."""

    name = None

    def new_digest(self, spec: DigestSpec) -> Handle:
        raise InvalidControlValue(f"engine {self.name} does not provide digest {spec.name}")

    def new_cmac(self, spec: CipherSpec, key: bytes) -> Handle:
        raise InvalidControlValue(f"engine {self.name} does not provide CMAC over {spec.name}")

    def new_gcm(self, spec: CipherSpec, key: bytes, iv: bytes) -> Handle:
        raise InvalidControlValue(f"engine {self.name} does not provide {spec.name}")

    def new_cshake(self, spec: XofSpec, function: bytes, custom: bytes) -> Handle:
        raise InvalidControlValue(f"engine {self.name} does not provide {spec.name}")

    def __repr__(self):
        return f"<Engine {self.name}>"


class OpenSSLEngine(Engine):
    name = "openssl"

    _DIGESTS: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
        "md5": hashes.MD5,
        "sha1": hashes.SHA1,
        "sha224": hashes.SHA224,
        "sha256": hashes.SHA256,
        "sha384": hashes.SHA384,
        "sha512": hashes.SHA512,
        "sha512-224": hashes.SHA512_224,
        "sha512-256": hashes.SHA512_256,
        "sha3-224": hashes.SHA3_224,
        "sha3-256": hashes.SHA3_256,
        "sha3-384": hashes.SHA3_384,
        "sha3-512": hashes.SHA3_512,
        "blake2b512": lambda: hashes.BLAKE2b(64),
        "blake2s256": lambda: hashes.BLAKE2s(32),
        "shake128": lambda: hashes.SHAKE128(16),
        "shake256": lambda: hashes.SHAKE256(32),
    }

    _CIPHERS = {
        "aes": algorithms.AES,
        "camellia": Camellia,
    }

    def __init__(self):
        self.backend = default_backend()

    def new_digest(self, spec):
        factory = self._DIGESTS.get(spec.name)
        if factory is None:
            return super().new_digest(spec)
        try:
            return Handle(hashes.Hash(factory(), backend=self.backend))
        except UnsupportedAlgorithm as exc:
            raise InvalidControlValue(f"digest {spec.name} unavailable: {exc}") from exc

    def new_cmac(self, spec, key):
        try:
            return Handle(cmac.CMAC(self._CIPHERS[spec.family](key), backend=self.backend))
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise InvalidControlValue(f"cannot key {spec.name}: {exc}") from exc

    def new_gcm(self, spec, key, iv):
        try:
            cipher = Cipher(algorithms.AES(key), modes.GCM(iv), backend=self.backend)
            return GcmHandle(cipher.encryptor())
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise InvalidControlValue(f"cannot key {spec.name}: {exc}") from exc


class PyCryptodomeEngine(Engine):
    name = "pycryptodome"

    _DIGESTS = {
        "md5": MD5.new,
        "sha1": SHA1.new,
        "sha224": SHA224.new,
        "sha256": SHA256.new,
        "sha384": SHA384.new,
        "sha512": SHA512.new,
        "sha512-224": lambda: SHA512.new(truncate="224"),
        "sha512-256": lambda: SHA512.new(truncate="256"),
    }

    _XOFS = {
        "cshake128": cSHAKE128,
        "cshake256": cSHAKE256,
    }

    def new_digest(self, spec):
        factory = self._DIGESTS.get(spec.name)
        if factory is None:
            return super().new_digest(spec)
        return Handle(factory(), finish="digest")

    def new_cmac(self, spec, key):
        if spec.family != "aes":
            return super().new_cmac(spec, key)
        try:
            return Handle(CMAC.new(key, ciphermod=AES), finish="digest")
        except ValueError as exc:
            raise InvalidControlValue(f"cannot key {spec.name}: {exc}") from exc

    def new_gcm(self, spec, key, iv):
        try:
            return Handle(AES.new(key, AES.MODE_GCM, nonce=iv), finish="digest")
        except ValueError as exc:
            raise InvalidControlValue(f"cannot key {spec.name}: {exc}") from exc

    def new_cshake(self, spec, function, custom):
        # cSHAKE with a function name N is only reachable through the
        # module-level _new(); new() fixes N to the empty string.
        return Handle(self._XOFS[spec.name]._new(b"", custom, function), finish="read")


ENGINES: Dict[str, Engine] = {e.name: e for e in (OpenSSLEngine(), PyCryptodomeEngine())}


def get_engine(name: Optional[str] = None) -> Engine:
    key = (name or DEFAULT_ENGINE).strip().lower()
    engine = ENGINES.get(key)
    if engine is None:
        raise NotFound(f"unknown engine: {name}")
    return engine
