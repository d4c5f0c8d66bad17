import dataclasses

import pytest

from algorithms import BUILTIN_DESCRIPTORS, load_builtin_algorithms
from algorithms.cmac import CMAC
from algorithms.hmac import HMAC
from algorithms.kmac import KMAC128
from core.errors import DuplicateAlgorithm, NotFound
from core.registry import Registry, default_registry


def test_every_builtin_round_trips(registry):
    for d in BUILTIN_DESCRIPTORS:
        assert registry.lookup_by_name(d.name) is d
        assert registry.lookup_by_id(d.mac_id) is d
        if d.oid:
            assert registry.lookup_by_oid(d.oid) is d


def test_known_ids_and_oids(registry):
    assert registry.lookup_by_id(855).name == "hmac"
    assert registry.lookup_by_id(894).name == "cmac"
    assert registry.lookup_by_oid("2.16.840.1.101.3.4.2.19").name == "kmac128"
    assert registry.lookup_by_oid("1.0.9797.3.4").name == "gmac"


def test_name_lookup_is_case_insensitive(registry):
    assert registry.lookup_by_name("HMAC") is HMAC
    assert registry.lookup_by_name("  Kmac128 ") is KMAC128


def test_lookup_accepts_any_key_form(registry):
    assert registry.lookup("cmac") is CMAC
    assert registry.lookup(894) is CMAC
    assert registry.lookup("2.16.840.1.101.3.4.2.19") is KMAC128
    assert registry.lookup(HMAC) is HMAC


def test_misses_raise_not_found(registry):
    with pytest.raises(NotFound):
        registry.lookup_by_name("siphash")
    with pytest.raises(NotFound):
        registry.lookup_by_id(1)
    with pytest.raises(NotFound):
        registry.lookup_by_oid("1.2.3")
    # NotFound is also a LookupError
    with pytest.raises(LookupError):
        registry.lookup("nope")


def test_enumeration_is_sorted(registry):
    names = registry.names()
    assert names == sorted(names)
    assert len(registry) == len(BUILTIN_DESCRIPTORS)
    assert "poly1305" in registry
    assert 855 in registry
    assert "md5" not in registry
    assert [d.name for d in registry] == names


def test_reregistering_same_descriptor_is_noop(registry):
    before = registry.names()
    assert registry.register(HMAC) is HMAC
    load_builtin_algorithms(registry)
    assert registry.names() == before


def test_conflicting_name_is_rejected_atomically(registry):
    impostor = dataclasses.replace(HMAC, mac_id=9999)
    with pytest.raises(DuplicateAlgorithm):
        registry.register(impostor)
    # nothing of the impostor got bound
    with pytest.raises(NotFound):
        registry.lookup_by_id(9999)
    assert registry.lookup_by_name("hmac") is HMAC


def test_conflicting_id_is_rejected(registry):
    impostor = dataclasses.replace(HMAC, name="hmac2")
    with pytest.raises(DuplicateAlgorithm):
        registry.register(impostor)
    with pytest.raises(NotFound):
        registry.lookup_by_name("hmac2")


def test_explicit_replace_unbinds_old_keys(registry):
    newer = dataclasses.replace(HMAC, mac_id=9999)
    registry.register(newer, replace=True)
    assert registry.lookup_by_name("hmac") is newer
    assert registry.lookup_by_id(9999) is newer
    with pytest.raises(NotFound):
        registry.lookup_by_id(855)


def test_aliases_are_registered():
    reg = Registry()
    aliased = dataclasses.replace(CMAC, aliases=("AES-CMAC",))
    reg.register(aliased)
    assert reg.lookup_by_name("aes-cmac") is aliased
    assert len(reg) == 1


def test_default_registry_is_process_wide():
    assert default_registry() is default_registry()
    load_builtin_algorithms()
    assert default_registry().lookup_by_name("hmac") is HMAC


def test_loading_into_a_fresh_registry_stays_local():
    before = len(default_registry())
    fresh = Registry()
    assert len(fresh) == 0
    got = load_builtin_algorithms(fresh)
    assert got is fresh
    assert len(fresh) == len(BUILTIN_DESCRIPTORS)
    assert len(default_registry()) == before


def test_fixture_registry_is_not_the_default(registry):
    assert registry is not default_registry()
