import hashlib
import hmac as std_hmac

import pytest

from algorithms import load_builtin_algorithms
from core.api import compute_mac, context_copy, context_create, context_free, verify_mac
from core.context import MacContext
from core.controls import Command, make_control
from core.errors import InvalidControlValue, NotFound, UnsupportedControl
from core.registry import Registry
from reporting.batch import MacBatchRunner, MacJob


def test_create_by_name_id_and_oid(registry):
    for key in ("hmac", 855, "HMAC"):
        ctx = context_create(key, registry=registry)
        assert ctx.descriptor.mac_id == 855
        context_free(ctx)
    ctx = context_create("2.16.840.1.101.3.4.2.20", registry=registry)
    assert ctx.descriptor.name == "kmac256"
    context_free(ctx)


def test_create_unknown(registry):
    with pytest.raises(NotFound):
        context_create(12345, registry=registry)


def test_typed_and_string_controls_mix(registry):
    tag = compute_mac("hmac", b"msg", make_control(Command.SET_MD, "sha256"), ("key", "k"),
                      registry=registry)
    assert tag == std_hmac.new(b"k", b"msg", hashlib.sha256).digest()


def test_create_propagates_control_errors(registry):
    with pytest.raises(UnsupportedControl):
        context_create("poly1305", ("digest", "sha256"), registry=registry)
    with pytest.raises(InvalidControlValue):
        context_create("hmac", ("key", "k"), registry=registry)


def test_verify(registry):
    controls = (("digest", "sha256"), ("key", "k"))
    tag = compute_mac("hmac", b"msg", *controls, registry=registry)
    assert verify_mac("hmac", b"msg", tag, *controls, registry=registry)
    assert not verify_mac("hmac", b"msg!", tag, *controls, registry=registry)
    assert not verify_mac("hmac", b"msg", tag[:-1], *controls, registry=registry)


def test_context_copy(registry):
    src = context_create("cmac", ("cipher", "aes-128-cbc"), ("hexkey", "00" * 16), registry=registry)
    dest = context_create("cmac", registry=registry)
    src.init()
    src.update(b"abc")
    context_copy(dest, src)
    assert dest.finalize() == src.finalize()
    context_free(src)
    context_free(dest)


def test_empty_registry_is_not_replaced_by_default():
    load_builtin_algorithms()
    empty = Registry()
    with pytest.raises(NotFound):
        context_create("hmac", registry=empty)
    with pytest.raises(NotFound):
        MacContext.from_name("hmac", empty)
    with pytest.raises(NotFound):
        MacContext.from_id(855, empty)


def test_batch_runner_keeps_given_registry(tmp_path):
    empty = Registry()
    runner = MacBatchRunner([MacJob("hmac", [], b"x")], registry=empty, out_dir=str(tmp_path))
    assert runner.registry is empty
    assert runner.run()[0]["error"].startswith("NotFound")
