"""
core/api.py

Module-level entry points over MacContext: creation by descriptor, name or
id, null-safe free and copy, and one-shot compute / verify helpers.

Controls passed to the helpers are either ``Control`` values or
``(type_str, value_str)`` pairs in the string vocabulary, applied in order.
"""

import hmac
from typing import Optional, Tuple, Union

from core.context import MacContext
from core.controls import Control
from core.descriptor import MacDescriptor
from core.registry import Registry, default_registry

ControlArg = Union[Control, Tuple[str, str]]
AlgorithmArg = Union[MacDescriptor, str, int]


def context_create(algorithm: AlgorithmArg, *controls: ControlArg,
                   registry: Optional[Registry] = None) -> MacContext:
    descriptor = (default_registry() if registry is None else registry).lookup(algorithm)
    ctx = MacContext(descriptor)
    try:
        for ctl in controls:
            if isinstance(ctl, Control):
                ctx.control(ctl)
            else:
                ctx.control_str(*ctl)
    except Exception:
        ctx.free()
        raise
    return ctx


def context_free(ctx: Optional[MacContext]) -> None:
    if ctx is None:
        return
    ctx.free()


def context_copy(dest: MacContext, src: MacContext) -> None:
    dest.copy_from(src)


def compute_mac(algorithm: AlgorithmArg, data: bytes, *controls: ControlArg,
                registry: Optional[Registry] = None) -> bytes:
    with context_create(algorithm, *controls, registry=registry) as ctx:
        ctx.init()
        ctx.update(data)
        return ctx.finalize()


def verify_mac(algorithm: AlgorithmArg, data: bytes, tag: bytes, *controls: ControlArg,
               registry: Optional[Registry] = None) -> bool:
    expected = compute_mac(algorithm, data, *controls, registry=registry)
    return hmac.compare_digest(expected, bytes(tag))
