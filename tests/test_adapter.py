import hashlib

import pytest

from core.adapter import CipherAdapter, DigestAdapter, XofAdapter
from core.errors import ComputationError, CopyError, InvalidControlValue
from core.providers import get_cipher, get_digest, get_engine, get_xof


@pytest.mark.parametrize("engine", ["openssl", "pycryptodome"])
def test_digest_adapter_matches_hashlib(engine):
    a = DigestAdapter(get_engine(engine))
    a.bind(get_digest("sha256"))
    a.reset()
    a.feed(b"abc")
    assert a.finish() == hashlib.sha256(b"abc").digest()
    assert not a.running


def test_duplicate_is_deep():
    a = DigestAdapter()
    a.bind(get_digest("sha1"))
    a.reset()
    a.feed(b"ab")
    b = a.duplicate()
    a.feed(b"c")
    b.feed(b"d")
    assert a.finish() == hashlib.sha1(b"abc").digest()
    assert b.finish() == hashlib.sha1(b"abd").digest()


def test_bind_checks_primitive_kind():
    with pytest.raises(InvalidControlValue):
        DigestAdapter().bind(get_cipher("aes-128-cbc"))
    with pytest.raises(InvalidControlValue):
        CipherAdapter().bind(get_digest("sha256"))


def test_use_before_bind_or_reset():
    a = DigestAdapter()
    with pytest.raises(ComputationError):
        a.reset()
    a.bind(get_digest("md5"))
    with pytest.raises(ComputationError):
        a.feed(b"x")
    with pytest.raises(ComputationError):
        a.finish()


def test_rebind_drops_running_computation():
    a = DigestAdapter()
    a.bind(get_digest("sha256"))
    a.reset()
    a.bind(get_digest("sha512"))
    assert not a.running


def test_cipher_adapter_keying():
    a = CipherAdapter()
    with pytest.raises(InvalidControlValue):
        a.rekey(bytes(16))
    a.bind(get_cipher("aes-128-cbc"))
    with pytest.raises(InvalidControlValue):
        a.rekey(bytes(15))
    a.rekey(bytes(16))
    assert a.keyed
    a.bind(get_cipher("aes-128-cbc"))
    assert not a.keyed


def test_cipher_adapter_destroy_wipes_key():
    a = CipherAdapter()
    a.bind(get_cipher("aes-128-gcm"))
    a.rekey(b"k" * 16, iv=b"i" * 12)
    key_buf, iv_buf = a._key, a._iv
    a.destroy()
    assert bytes(key_buf) == bytes(16)
    assert bytes(iv_buf) == bytes(12)
    assert not a.keyed


def test_gcm_handle_cannot_be_duplicated():
    a = CipherAdapter()
    a.bind(get_cipher("aes-128-gcm"))
    a.rekey(bytes(16), iv=bytes(12))
    a.reset()
    with pytest.raises(CopyError):
        a.duplicate()


def test_xof_adapter_reads_requested_length():
    a = XofAdapter()
    a.bind(get_xof("cshake128"))
    a.personalize(b"", b"")
    a.reset()
    a.feed(b"abc")
    # cSHAKE with empty N and S is SHAKE128
    assert a.finish(40) == hashlib.shake_128(b"abc").digest(40)
