"""Generic MAC computation layer: descriptors, registry, contexts and controls."""

from core.api import compute_mac, context_copy, context_create, context_free, verify_mac
from core.context import MacContext, Phase
from core.controls import Command, Control, make_control, parse_control, parse_hex_control
from core.descriptor import MacDescriptor, SizeKind, SizePolicy
from core.errors import (AllocationError, ComputationError, ControlAfterInit, CopyError,
                         DuplicateAlgorithm, InvalidControlValue, MacError, NotFound,
                         NotInitialized, UnsupportedControl)
from core.registry import Registry, default_registry, lookup_by_id, lookup_by_name, lookup_by_oid

__all__ = [
    "MacContext", "Phase", "MacDescriptor", "SizeKind", "SizePolicy",
    "Command", "Control", "make_control", "parse_control", "parse_hex_control",
    "Registry", "default_registry", "lookup_by_name", "lookup_by_id", "lookup_by_oid",
    "context_create", "context_free", "context_copy", "compute_mac", "verify_mac",
    "MacError", "NotFound", "AllocationError", "DuplicateAlgorithm", "CopyError",
    "UnsupportedControl", "InvalidControlValue", "ControlAfterInit", "NotInitialized",
    "ComputationError",
]
