from __future__ import annotations

import json
import logging

import questionary
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from trackmatch_cli.config import config_summary, load_config, write_config_values
from trackmatch_cli.matching import ScoredCandidate
from trackmatch_cli.spotify import SpotifyCredential, search_tracks
from trackmatch_cli.ytmusic import match_query, open_client


YTMUSIC_WATCH_URL = "https://music.youtube.com/watch?v="

app = typer.Typer(no_args_is_help=True, add_completion=False)
auth_app = typer.Typer(no_args_is_help=True)
app.add_typer(auth_app, name="auth")

console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "-v", "--verbose", help="Log upstream calls")):
  """Find the YouTube Music recording that matches a Spotify track."""
  logging.basicConfig(
    level=logging.DEBUG if verbose else logging.WARNING,
    format="%(message)s",
    handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    force=True,
  )


@app.command()
def status():
  """Show config status (masked)."""
  cfg = load_config()
  console.print(config_summary(cfg))


@auth_app.command("spotify")
def auth_spotify(
  client_id: str = typer.Option(None, help="Spotify client id (or set SPOTIFY_CLIENT_ID)"),
  client_secret: str = typer.Option(None, help="Spotify client secret (or set SPOTIFY_CLIENT_SECRET)"),
):
  """Save Spotify client credentials and check they can obtain a token."""
  cfg = load_config()
  if not client_id:
    client_id = cfg.spotify.client_id or typer.prompt("Spotify client id", hide_input=True)
  if not client_secret:
    client_secret = cfg.spotify.client_secret or typer.prompt("Spotify client secret", hide_input=True)

  try:
    SpotifyCredential(client_id, client_secret).refresh()
  except RuntimeError as e:
    console.print(str(e))
    raise typer.Exit(code=2)

  path = write_config_values({"SPOTIFY_CLIENT_ID": client_id, "SPOTIFY_CLIENT_SECRET": client_secret})
  console.print(f"Wrote Spotify credentials to {path}")


def _render_matches(ranked: list[ScoredCandidate]):
  table = Table(title="YouTube Music matches", show_lines=False)
  table.add_column("#", justify="right", style="bold")
  table.add_column("Title")
  table.add_column("Artist")
  table.add_column("Score", justify="right")
  table.add_column("Video", overflow="fold")
  for i, r in enumerate(ranked, start=1):
    style = "green" if r.score > 0 else None
    table.add_row(str(i), r.candidate.title, r.resolved_artist, str(r.score), r.candidate.id, style=style)
  console.print(table)


def _pick(ranked: list[ScoredCandidate]) -> ScoredCandidate | None:
  choices = [f"{i}. {r.candidate.title} - {r.resolved_artist} ({r.score})" for i, r in enumerate(ranked, start=1)]
  picked = questionary.select("Pick the matching track:", choices=choices).ask()
  if not picked:
    return None
  return ranked[int(picked.split(".", 1)[0]) - 1]


def _run_match(query: str, *, limit: int | None, as_json: bool, pick: bool) -> None:
  cfg = load_config()
  try:
    client = open_client(cfg)
    ranked = match_query(client, query, limit=limit or cfg.ytmusic.limit)
  except RuntimeError as e:
    console.print(str(e))
    raise typer.Exit(code=2)

  if as_json:
    typer.echo(json.dumps([r.to_record() for r in ranked], indent=2))
    return

  _render_matches(ranked)
  if pick:
    selected = _pick(ranked)
    if not selected:
      raise typer.Exit(code=1)
    console.print(f"{YTMUSIC_WATCH_URL}{selected.candidate.id}")


@app.command("match")
def match_command(
  query: list[str] = typer.Argument(
    ...,
    help='Track to look for, as "<title> : <artist>" (e.g. `trackmatch match "Blinding Lights : The Weeknd"`).',
  ),
  limit: int | None = typer.Option(None, "--max-results", min=1, max=50, help="Candidates to fetch (default from config)"),
  as_json: bool = typer.Option(False, "--json", help="Print ranked records as JSON"),
  pick: bool = typer.Option(False, "--pick", help="Interactively pick one match and print its link"),
):
  """Rank YouTube Music search results against a "<title> : <artist>" query."""
  _run_match(" ".join(query).strip(), limit=limit, as_json=as_json, pick=pick)


@app.command("spotify")
def spotify_command(
  query: list[str] = typer.Argument(..., help="Spotify search query"),
  offset: int = typer.Option(0, "--offset", min=0, help="Result offset (pages of 30)"),
  pick: bool = typer.Option(False, "--pick", help="Pick a Spotify track and match it on YouTube Music"),
):
  """Search Spotify tracks; optionally pick one and match it on YouTube Music."""
  cfg = load_config()
  try:
    credential = SpotifyCredential.from_config(cfg)
    page = search_tracks(credential, query=" ".join(query).strip(), offset=offset)
  except RuntimeError as e:
    console.print(str(e))
    raise typer.Exit(code=2)

  table = Table(title="Spotify tracks", show_lines=False)
  table.add_column("#", justify="right", style="bold")
  table.add_column("Title")
  table.add_column("Artist")
  table.add_column("Id", overflow="fold")
  for i, t in enumerate(page.items, start=1):
    table.add_row(str(i), t.title, t.artist, t.id)
  console.print(table)
  if page.has_next_page:
    console.print(f"More results: --offset {page.next_offset}")

  if not pick:
    return
  choices = [f"{i}. {t.title} - {t.artist}" for i, t in enumerate(page.items, start=1)]
  picked = questionary.select("Pick the Spotify track to match:", choices=choices).ask()
  if not picked:
    raise typer.Exit(code=1)
  track = page.items[int(picked.split(".", 1)[0]) - 1]
  _run_match(track.query, limit=None, as_json=False, pick=True)


if __name__ == "__main__":
  app()
