"""Core data models for combo-finder."""

from dataclasses import dataclass
from pathlib import Path

# Slippi replays number frames from -123 (the start-of-game countdown).
FIRST_FRAME = -123


@dataclass(frozen=True)
class Combo:
    """A kill combo window in a Slippi replay.

    ``start`` and ``end`` are 0-based frame indices (``end`` exclusive) that
    already include the configured lead-in and lead-out.
    """

    path: Path
    start: int
    end: int

    @property
    def frame_count(self) -> int:
        """Number of frames in this combo window."""
        return self.end - self.start

    @property
    def duration_seconds(self) -> float:
        """Duration in seconds (assuming 60fps)."""
        return self.frame_count / 60.0

    @property
    def start_frame(self) -> int:
        """Start frame in the replay's native numbering."""
        return self.start + FIRST_FRAME

    @property
    def end_frame(self) -> int:
        """End frame in the replay's native numbering."""
        return self.end + FIRST_FRAME
