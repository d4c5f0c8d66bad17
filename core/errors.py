"""Error taxonomy for the MAC layer.

Every operation raises one of these directly to its caller; nothing is
retried or silently recovered. ``UnsupportedControl`` is the one outcome a
caller may treat as "control skipped" (see ``MacContext.try_control``).
"""


class MacError(Exception):
    """Base class for all MAC layer failures."""


class NotFound(MacError, LookupError):
    """Registry or provider lookup miss."""


class AllocationError(MacError, MemoryError):
    """Algorithm state could not be created."""


class DuplicateAlgorithm(MacError):
    """A name, id or OID is already bound to a different descriptor."""


class CopyError(MacError):
    """The context cannot be duplicated in its current state."""


class UnsupportedControl(MacError):
    """The algorithm does not implement the requested control."""


class InvalidControlValue(MacError, ValueError):
    """The control payload was rejected (wrong type, size or range)."""


class ControlAfterInit(InvalidControlValue):
    """A configuration control was applied while a computation is running."""


class NotInitialized(MacError):
    """A streaming operation was invoked outside the Streaming phase."""


class ComputationError(MacError):
    """Algorithm-internal failure during init, update or final."""
