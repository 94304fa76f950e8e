"""
Escape Room engine.

Gated assessment sessions built from a single content payload: two MCQ sets,
two matching sets, a fill-the-gap text and open questions, played in order.
"""

from .exceptions import BundleError, EscapeRoomError, PayloadLoadError
from .payload import ContentPayload, load_payload, parse_payload
from .session import EscapeRoomSession, Stage

__version__ = "1.0.0"

__all__ = [
    "BundleError",
    "ContentPayload",
    "EscapeRoomError",
    "EscapeRoomSession",
    "PayloadLoadError",
    "Stage",
    "load_payload",
    "parse_payload",
]
