"""
core/registry.py

Process-wide table of MAC descriptors keyed by name (case-insensitive, with
aliases), numeric id and OID.

Registration is expected once, at start-up (see
``algorithms.load_builtin_algorithms``); after that the table is only read,
and lookups are safe from any number of threads without locking.
"""

import logging
import threading
from typing import Dict, Iterator, List, Union

from core.descriptor import MacDescriptor
from core.errors import DuplicateAlgorithm, NotFound

log = logging.getLogger("core.registry")


def _name_key(name: str) -> str:
    return name.strip().lower()


class Registry:
    def __init__(self):
        self._by_name: Dict[str, MacDescriptor] = {}
        self._by_id: Dict[int, MacDescriptor] = {}
        self._by_oid: Dict[str, MacDescriptor] = {}
        # serializes writers only; readers never take it
        self._lock = threading.Lock()

    def _keys(self, d: MacDescriptor):
        names = [_name_key(n) for n in (d.name,) + tuple(d.aliases)]
        return names, d.mac_id, d.oid

    def register(self, descriptor: MacDescriptor, replace: bool = False) -> MacDescriptor:
        """Bind a descriptor under its name, aliases, id and OID, all or nothing.

        Registering an equal descriptor again is a no-op. A key already bound
        to a different descriptor raises DuplicateAlgorithm unless
        ``replace`` is set, in which case every key of the displaced
        descriptor is dropped first.
        """
        names, mac_id, oid = self._keys(descriptor)
        with self._lock:
            clashes = {self._by_name[n] for n in names if n in self._by_name}
            if mac_id in self._by_id:
                clashes.add(self._by_id[mac_id])
            if oid is not None and oid in self._by_oid:
                clashes.add(self._by_oid[oid])

            others = {d for d in clashes if d != descriptor}
            if not others and clashes and self._bound_fully(descriptor):
                return descriptor
            if others and not replace:
                taken = ", ".join(sorted(d.name for d in others))
                raise DuplicateAlgorithm(f"{descriptor.name} (id {mac_id}) conflicts with {taken}")

            for old in clashes:
                self._unbind(old)
            for n in names:
                self._by_name[n] = descriptor
            self._by_id[mac_id] = descriptor
            if oid is not None:
                self._by_oid[oid] = descriptor
        log.debug("registered %s id=%d oid=%s", descriptor.name, mac_id, oid)
        return descriptor

    def _bound_fully(self, d: MacDescriptor) -> bool:
        names, mac_id, oid = self._keys(d)
        return (all(self._by_name.get(n) == d for n in names)
                and self._by_id.get(mac_id) == d
                and (oid is None or self._by_oid.get(oid) == d))

    def _unbind(self, d: MacDescriptor) -> None:
        names, mac_id, oid = self._keys(d)
        for n in names:
            if self._by_name.get(n) == d:
                del self._by_name[n]
        if self._by_id.get(mac_id) == d:
            del self._by_id[mac_id]
        if oid is not None and self._by_oid.get(oid) == d:
            del self._by_oid[oid]

    # -------------------
    # Lookups
    # -------------------
    def lookup_by_name(self, name: str) -> MacDescriptor:
        d = self._by_name.get(_name_key(name))
        if d is None:
            raise NotFound(f"no MAC algorithm named {name!r}")
        return d

    def lookup_by_id(self, mac_id: int) -> MacDescriptor:
        d = self._by_id.get(mac_id)
        if d is None:
            raise NotFound(f"no MAC algorithm with id {mac_id}")
        return d

    def lookup_by_oid(self, oid: str) -> MacDescriptor:
        d = self._by_oid.get(oid.strip())
        if d is None:
            raise NotFound(f"no MAC algorithm with OID {oid}")
        return d

    def lookup(self, key: Union[MacDescriptor, str, int]) -> MacDescriptor:
        """Resolve a descriptor, name, OID or numeric id."""
        if isinstance(key, MacDescriptor):
            return key
        if isinstance(key, int):
            return self.lookup_by_id(key)
        if key.strip() in self._by_oid:
            return self._by_oid[key.strip()]
        return self.lookup_by_name(key)

    def descriptors(self) -> List[MacDescriptor]:
        """Every registered descriptor once, sorted by name."""
        return sorted(self._by_id.values(), key=lambda d: d.name)

    def names(self) -> List[str]:
        return [d.name for d in self.descriptors()]

    def __iter__(self) -> Iterator[MacDescriptor]:
        return iter(self.descriptors())

    def __len__(self):
        return len(self._by_id)

    def __contains__(self, key) -> bool:
        try:
            self.lookup(key)
        except (NotFound, AttributeError):
            return False
        return True


_default = Registry()


def default_registry() -> Registry:
    """The process-wide registry (empty until algorithms are loaded into it)."""
    return _default


def lookup_by_name(name: str) -> MacDescriptor:
    return default_registry().lookup_by_name(name)


def lookup_by_id(mac_id: int) -> MacDescriptor:
    return default_registry().lookup_by_id(mac_id)


def lookup_by_oid(oid: str) -> MacDescriptor:
    return default_registry().lookup_by_oid(oid)
