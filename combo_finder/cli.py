"""CLI interface for combo-finder."""

import logging
from pathlib import Path

import click

from combo_finder.config import Config, get_default_config_path, load_config
from combo_finder.errors import ComboFinderError
from combo_finder.finder import target_path
from combo_finder.playlist import read_playlist, write_playlist

DEFAULT_OUTPUT = "combos.json"


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--config",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config file",
)
@click.option("-v", "--verbose", is_flag=True, help="Log skipped replays and timing")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """Combo-finder: Find kill combos in Slippi replays and build playlists."""
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config_path = config or get_default_config_path()
    try:
        ctx.obj["config"] = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid config {config_path}: {e}") from e


@main.command()
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@click.argument("strictness", type=click.FloatRange(0.0, 1.0), required=False)
@click.argument(
    "out_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_OUTPUT,
    required=False,
)
@click.option("--lead-in", type=click.IntRange(min=0), default=None, help="Frames before the combo")
@click.option("--lead-out", type=click.IntRange(min=0), default=None, help="Frames after the kill")
@click.option("--player-character", default=None, help="Attacking character (e.g., fox)")
@click.option("--player-code", default=None, help="Attacker connect code (e.g., PDL-637)")
@click.option("--player-name", default=None, help="Attacker display name (substring)")
@click.option("--opponent-character", default=None, help="Defending character")
@click.option("--opponent-code", default=None, help="Defender connect code")
@click.option("--opponent-name", default=None, help="Defender display name (substring)")
@click.pass_context
def find(
    ctx: click.Context,
    input_path: Path,
    strictness: float | None,
    out_path: Path,
    lead_in: int | None,
    lead_out: int | None,
    player_character: str | None,
    player_code: str | None,
    player_name: str | None,
    opponent_character: str | None,
    opponent_code: str | None,
    opponent_name: str | None,
) -> None:
    """Find kill combos in a replay or directory and write a playlist.

    STRICTNESS ranges from 0 (least strict) to 1 (most strict).
    """
    cfg: Config = ctx.obj["config"]
    config = cfg.with_overrides(
        strictness=strictness,
        lead_in=lead_in,
        lead_out=lead_out,
        player_character=player_character,
        player_code=player_code,
        player_name=player_name,
        opponent_character=opponent_character,
        opponent_code=opponent_code,
        opponent_name=opponent_name,
    )

    click.echo(f"Scanning {input_path} (strictness {config.strictness})...")

    with click.progressbar(length=0, label="Replays") as bar:

        def progress_callback(completed: int, total: int) -> None:
            if completed == 0:
                bar.length = total
            else:
                bar.update(1)

        try:
            combos = target_path(config, input_path, progress_callback)
        except ComboFinderError as e:
            raise click.ClickException(str(e)) from e

    try:
        write_playlist(combos, out_path)
    except OSError as e:
        raise click.ClickException(f"Could not write playlist {out_path}: {e}") from e

    replay_count = len({c.path for c in combos})
    click.echo(f"Found {len(combos)} combos in {replay_count} replays")
    click.echo(f"Playlist: {out_path}")


@main.command()
@click.argument("playlist", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show(playlist: Path) -> None:
    """List the combos in a playlist file."""
    try:
        combos = read_playlist(playlist)
    except ComboFinderError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Found {len(combos)} combos")
    for combo in combos:
        click.echo(
            f"  {combo.path.name}: frames {combo.start_frame}-{combo.end_frame} "
            f"({combo.duration_seconds:.1f}s)"
        )


if __name__ == "__main__":
    main()
