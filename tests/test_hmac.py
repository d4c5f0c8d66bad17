import hashlib
import hmac as std_hmac

import pytest

from core.api import compute_mac, context_create
from core.controls import Command
from core.errors import InvalidControlValue

EMPTY_KEY_EMPTY_MESSAGE = {
    "md5": "74e6f7298a9c2d168935f58c001bad88",
    "sha1": "fbdb1d1b18aa6c08324b7d64b71fb76370690e1d",
    "sha256": "b613679a0814d9ec772f95d778c35fc5ff1697c493715653c6c712144292c5ad",
}


@pytest.mark.parametrize("engine", ["openssl", "pycryptodome"])
@pytest.mark.parametrize("digest", sorted(EMPTY_KEY_EMPTY_MESSAGE))
def test_empty_key_empty_message(registry, engine, digest):
    tag = compute_mac("hmac", b"", ("engine", engine), ("digest", digest), ("key", ""),
                      registry=registry)
    assert tag.hex() == EMPTY_KEY_EMPTY_MESSAGE[digest]


def test_rfc4231_case2(registry):
    tag = compute_mac("hmac", b"what do ya want for nothing?", ("digest", "sha256"), ("key", "Jefe"),
                      registry=registry)
    assert tag.hex() == "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"


@pytest.mark.parametrize("digest,factory", [
    ("sha224", hashlib.sha224),
    ("sha384", hashlib.sha384),
    ("sha512", hashlib.sha512),
    ("sha3-256", hashlib.sha3_256),
    ("sha3-512", hashlib.sha3_512),
])
def test_matches_stdlib_hmac(registry, digest, factory):
    key = bytes(range(20))
    msg = b"The quick brown fox jumps over the lazy dog"
    tag = compute_mac("hmac", msg, ("digest", digest), ("hexkey", key.hex()), registry=registry)
    assert tag == std_hmac.new(key, msg, factory).digest()


def test_long_key_is_hashed_first(registry):
    key = b"k" * 200
    tag = compute_mac("hmac", b"msg", ("digest", "sha256"), ("hexkey", key.hex()), registry=registry)
    assert tag == std_hmac.new(key, b"msg", hashlib.sha256).digest()


def test_key_with_embedded_zero_bytes(registry):
    key = b"\x00ab\x00\x00"
    tag = compute_mac("hmac", b"msg", ("digest", "sha1"), ("hexkey", key.hex()), registry=registry)
    assert tag == std_hmac.new(key, b"msg", hashlib.sha1).digest()


def test_key_before_digest_is_rejected(registry):
    with context_create("hmac", registry=registry) as ctx:
        with pytest.raises(InvalidControlValue):
            ctx.control(Command.SET_KEY, b"key")


def test_xof_digest_is_rejected(registry):
    with context_create("hmac", registry=registry) as ctx:
        with pytest.raises(InvalidControlValue):
            ctx.control_str("digest", "shake128")


def test_digest_missing_from_engine_is_rejected(registry):
    with context_create("hmac", ("engine", "pycryptodome"), registry=registry) as ctx:
        with pytest.raises(InvalidControlValue):
            ctx.control_str("digest", "sha3-256")
        assert ctx.size() == 0


def test_rejected_engine_switch_keeps_keyed_state(registry):
    with context_create("hmac", ("digest", "sha3-256"), ("key", "secret"), registry=registry) as ctx:
        with pytest.raises(InvalidControlValue):
            ctx.control_str("engine", "pycryptodome")
        assert ctx._state.engine.name == "openssl"
        ctx.init()
        ctx.update(b"payload")
        assert ctx.finalize() == std_hmac.new(b"secret", b"payload", hashlib.sha3_256).digest()


def test_rejected_digest_switch_keeps_keyed_state(registry):
    with context_create("hmac", ("engine", "pycryptodome"), ("digest", "sha256"), ("key", "secret"),
                        registry=registry) as ctx:
        with pytest.raises(InvalidControlValue):
            ctx.control_str("digest", "sha3-512")
        assert ctx.size() == 32
        ctx.init()
        ctx.update(b"payload")
        assert ctx.finalize() == std_hmac.new(b"secret", b"payload", hashlib.sha256).digest()


def test_digest_change_rederives_from_retained_key(registry):
    with context_create("hmac", ("digest", "sha256"), ("key", "secret"), registry=registry) as ctx:
        ctx.control(Command.SET_MD, "sha1")
        ctx.control(Command.SET_ENGINE, "pycryptodome")
        assert ctx.size() == 20
        ctx.init()
        ctx.update(b"payload")
        assert ctx.finalize() == std_hmac.new(b"secret", b"payload", hashlib.sha1).digest()


def test_engines_agree(registry):
    msg = bytes(range(256)) * 3
    tags = {
        compute_mac("hmac", msg, ("engine", engine), ("digest", "sha512"), ("key", "k"), registry=registry)
        for engine in ("openssl", "pycryptodome")
    }
    assert len(tags) == 1


def test_prefix_fork_many_suffixes(registry):
    with context_create("hmac", ("digest", "sha256"), ("key", "fork"), registry=registry) as ctx:
        ctx.init()
        ctx.update(b"common header;")
        for suffix in (b"a", b"bb", b""):
            fork = ctx.copy()
            fork.update(suffix)
            assert fork.finalize() == std_hmac.new(b"fork", b"common header;" + suffix,
                                                   hashlib.sha256).digest()
            fork.free()
