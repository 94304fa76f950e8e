"""
Exceptions raised at the engine's boundaries.

The runtime itself never raises on learner input; these cover loading a
payload from disk and writing the bundled artifact.
"""


class EscapeRoomError(Exception):
    """Base class for escape room errors."""
    pass


class PayloadLoadError(EscapeRoomError):
    """Raised when a payload file cannot be read or parsed."""
    pass


class BundleError(EscapeRoomError):
    """Raised when the standalone artifact cannot be written."""
    pass
