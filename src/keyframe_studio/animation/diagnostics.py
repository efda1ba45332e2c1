"""
Diagnostic events and exceptions for the animation core.

Malformed animation data never raises: it degrades to "no effect" for the
affected channel and is reported as an AnimationDiagnostic. Only structural
misuse of the API raises (KeyframeLookupError).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Kinds of recoverable animation data problems."""

    INVALID_CLIP_DATA = "invalid_clip_data"
    DEGENERATE_KEYFRAME_RANGE = "degenerate_keyframe_range"
    NON_FINITE_RESULT = "non_finite_result"
    UNKNOWN_EASING = "unknown_easing"


@dataclass(frozen=True)
class AnimationDiagnostic:
    """A single recoverable problem found while loading or evaluating."""

    kind: DiagnosticKind
    message: str
    entity_id: Optional[str] = None
    property: Optional[str] = None

    def __str__(self) -> str:
        where = ""
        if self.entity_id is not None:
            where = f" [{self.entity_id}"
            if self.property is not None:
                where += f".{self.property}"
            where += "]"
        return f"{self.kind.value}{where}: {self.message}"


DiagnosticSink = Callable[[AnimationDiagnostic], None]


def report(
    sink: Optional[DiagnosticSink],
    kind: DiagnosticKind,
    message: str,
    entity_id: Optional[str] = None,
    property: Optional[str] = None,
) -> AnimationDiagnostic:
    """Log a diagnostic and forward it to ``sink`` if one is given."""
    diagnostic = AnimationDiagnostic(
        kind=kind, message=message, entity_id=entity_id, property=property
    )
    if kind is DiagnosticKind.UNKNOWN_EASING:
        logger.debug(str(diagnostic))
    else:
        logger.warning(str(diagnostic))
    if sink is not None:
        sink(diagnostic)
    return diagnostic


class AnimationError(Exception):
    """Base class for programmer errors raised by the animation core."""
    pass


class KeyframeLookupError(AnimationError, LookupError):
    """Raised when an entity, track or keyframe index does not exist."""
    pass
