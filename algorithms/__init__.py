"""Built-in MAC algorithm modules."""

import logging
from typing import Optional

from algorithms.blake2 import BLAKE2BMAC, BLAKE2SMAC
from algorithms.cmac import CMAC
from algorithms.gmac import GMAC
from algorithms.hmac import HMAC
from algorithms.kmac import KMAC128, KMAC256
from algorithms.poly1305 import POLY1305
from core.registry import Registry, default_registry

log = logging.getLogger("algorithms")

BUILTIN_DESCRIPTORS = (HMAC, CMAC, GMAC, KMAC128, KMAC256, POLY1305, BLAKE2BMAC, BLAKE2SMAC)


def load_builtin_algorithms(registry: Optional[Registry] = None) -> Registry:
    """Register every built-in algorithm; safe to call more than once."""
    if registry is None:
        registry = default_registry()
    for descriptor in BUILTIN_DESCRIPTORS:
        registry.register(descriptor)
    log.debug("loaded %d built-in algorithms", len(BUILTIN_DESCRIPTORS))
    return registry
