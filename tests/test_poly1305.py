import pytest

from core.api import compute_mac, context_create
from core.controls import Command
from core.errors import ComputationError, CopyError, InvalidControlValue, UnsupportedControl

# RFC 8439 section 2.5.2
KEY = "85d6be7857556d337f4452fe42d506a80103808afb0db2fd4abff6af4149f51b"
MSG = b"Cryptographic Forum Research Group"
TAG = "a8061dc1305136c6c22b8baf0c0127a9"


def test_rfc8439_vector(registry):
    assert compute_mac("poly1305", MSG, ("hexkey", KEY), registry=registry).hex() == TAG


def test_chunked(registry):
    with context_create("poly1305", ("hexkey", KEY), registry=registry) as ctx:
        ctx.init()
        for i in range(0, len(MSG), 5):
            ctx.update(MSG[i:i + 5])
        assert ctx.finalize().hex() == TAG


def test_key_must_be_32_bytes(registry):
    with context_create("poly1305", registry=registry) as ctx:
        with pytest.raises(InvalidControlValue):
            ctx.control(Command.SET_KEY, bytes(16))
        with pytest.raises(ComputationError):
            ctx.init()


def test_only_key_control(registry):
    with context_create("poly1305", registry=registry) as ctx:
        assert ctx.size() == 16
        for cmd, value in ((Command.SET_SIZE, 16), (Command.SET_MD, "sha256"), (Command.SET_IV, b"iv")):
            with pytest.raises(UnsupportedControl):
                ctx.control(cmd, value)


def test_copy_only_outside_stream(registry):
    with context_create("poly1305", ("hexkey", KEY), registry=registry) as ctx:
        dup = ctx.copy()
        ctx.init()
        with pytest.raises(CopyError):
            ctx.copy()
        dup.init()
        dup.update(MSG)
        assert dup.finalize().hex() == TAG
        dup.free()
