"""Exception types for combo-finder."""


class ComboFinderError(Exception):
    """Base class for errors surfaced to callers."""


class PathNotFoundError(ComboFinderError):
    """The target path does not exist."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Path not found: {path}")
        self.path = path


class ReplayError(ComboFinderError):
    """A replay could not be read or is not a supported 1v1 match."""


class PlaylistError(ComboFinderError):
    """Base class for playlist read errors."""


class PlaylistParseError(PlaylistError):
    """The playlist document is not valid JSON."""


class NotAPlaylistError(PlaylistError):
    """The document is valid JSON but not a playlist."""

    def __init__(self) -> None:
        super().__init__("File is not a playlist.")
