"""Slippi playlist (Dolphin queue) files."""

import json
from pathlib import Path
from typing import Any, cast

from combo_finder.errors import NotAPlaylistError, PlaylistParseError
from combo_finder.models import FIRST_FRAME, Combo


def playlist_document(combos: list[Combo]) -> dict[str, Any]:
    """Build the playlist document for a list of combos.

    Frames are written in the replay's native numbering (starting at -123).
    """
    return {
        "mode": "queue",
        "replay": "",
        "queue": [
            {
                "path": str(combo.path),
                "startFrame": combo.start_frame,
                "endFrame": combo.end_frame,
            }
            for combo in combos
        ],
    }


def write_playlist(combos: list[Combo], out_path: Path) -> Path:
    """Write combos to a playlist JSON file.

    Args:
        combos: Combos to queue, in playback order
        out_path: Path of the JSON file to write

    Returns:
        Path to the written file
    """
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(playlist_document(combos), f, indent=2)

    return out_path


def _entry_to_combo(entry: Any) -> Combo | None:
    if not isinstance(entry, dict):
        return None
    entry = cast(dict[str, Any], entry)

    path = entry.get("path")
    start = entry.get("startFrame")
    end = entry.get("endFrame")
    if not isinstance(path, str):
        return None
    # bool is an int subclass but not a frame number
    if not isinstance(start, int) or isinstance(start, bool):
        return None
    if not isinstance(end, int) or isinstance(end, bool):
        return None
    if start < FIRST_FRAME or end < FIRST_FRAME:
        return None

    return Combo(path=Path(path), start=start - FIRST_FRAME, end=end - FIRST_FRAME)


def parse_playlist_json(text: str) -> list[Combo]:
    """Parse a playlist document into combos.

    Entries without a string path and integer frames (at or after the
    first replay frame) are skipped.

    Raises:
        PlaylistParseError: If the text is not valid JSON
        NotAPlaylistError: If the document is not a queue playlist
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise PlaylistParseError(f"Invalid json: {e}") from e

    if not isinstance(parsed, dict):
        raise NotAPlaylistError()
    document = cast(dict[str, Any], parsed)

    if document.get("mode") != "queue":
        raise NotAPlaylistError()
    queue = document.get("queue")
    if not isinstance(queue, list):
        raise NotAPlaylistError()

    combos: list[Combo] = []
    for entry in cast(list[Any], queue):
        combo = _entry_to_combo(entry)
        if combo is not None:
            combos.append(combo)

    return combos


def read_playlist(playlist_path: Path) -> list[Combo]:
    """Read and parse a playlist JSON file."""
    try:
        text = playlist_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise PlaylistParseError(f"Playlist is not valid UTF-8: {e}") from e
    return parse_playlist_json(text)
