"""Configuration file support for combo-finder."""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, cast

try:
    import tomllib  # pyright: ignore[reportMissingTypeStubs]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found,import-untyped]


@dataclass(frozen=True)
class Config:
    """Detection settings for one run.

    Filters left as ``None`` are not applied. ``player`` is the attacking
    side, ``opponent`` the side that loses the stock.
    """

    # Detection
    lead_in: int = 30
    lead_out: int = 0
    strictness: float = 0.5  # 0 is least strict, 1 is most strict

    # Player filters
    player_character: str | None = None
    player_code: str | None = None
    player_name: str | None = None

    # Opponent filters
    opponent_character: str | None = None
    opponent_code: str | None = None
    opponent_name: str | None = None

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if not 0.0 <= self.strictness <= 1.0:
            raise ValueError(f"strictness must be between 0 and 1, got {self.strictness}")
        if self.lead_in < 0:
            raise ValueError(f"lead_in must not be negative, got {self.lead_in}")
        if self.lead_out < 0:
            raise ValueError(f"lead_out must not be negative, got {self.lead_out}")

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _load_side(config: Config, data: dict[str, Any], side: str) -> Config:
    section = cast(dict[str, Any], data.get(side, {}))
    overrides: dict[str, Any] = {}
    for key in ("character", "code", "name"):
        if key in section:
            overrides[f"{side}_{key}"] = str(section[key])
    return config.with_overrides(**overrides)


def load_config(config_path: Path) -> Config:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config.toml file

    Returns:
        Config object with values from file (or defaults if file missing)

    Raises:
        ValueError: If a loaded value is out of range
    """
    config = Config()

    if not config_path.exists():
        return config

    with open(config_path, "rb") as f:
        data = cast(dict[str, Any], tomllib.load(f))  # pyright: ignore[reportUnknownMemberType]

    # Detection section
    detection = cast(dict[str, Any], data.get("detection", {}))
    if "lead_in" in detection:
        config = replace(config, lead_in=int(detection["lead_in"]))
    if "lead_out" in detection:
        config = replace(config, lead_out=int(detection["lead_out"]))
    if "strictness" in detection:
        config = replace(config, strictness=float(detection["strictness"]))

    # Filter sections
    config = _load_side(config, data, "player")
    config = _load_side(config, data, "opponent")

    config.validate()
    return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path("~/.config/combo-finder/config.toml").expanduser()
