from __future__ import annotations

import logging

import requests
from ytmusicapi import YTMusic
from ytmusicapi.exceptions import YTMusicError

from trackmatch_cli.config import AppConfig
from trackmatch_cli.errors import MissingQuery, NoResults, UpstreamUnavailable
from trackmatch_cli.matching import ScoredCandidate, match_candidates, normalize
from trackmatch_cli.tracks import (
  ArtistField,
  CandidateTrack,
  MultipleArtists,
  NoArtist,
  SingleArtist,
  TrackDescriptor,
  parse_input,
)


logger = logging.getLogger(__name__)


def open_client(cfg: AppConfig) -> YTMusic:
  # unauthenticated search works fine; a headers/oauth file only adds personalization
  try:
    return YTMusic(cfg.ytmusic.auth_file or None, language=cfg.ytmusic.language)
  except YTMusicError as e:
    raise RuntimeError(
      f"Could not open YouTube Music client: {e}. Check YTMUSIC_AUTH_FILE / YTMUSIC_LANGUAGE."
    ) from e


def _artist_field(raw) -> ArtistField:
  if isinstance(raw, list):
    names = tuple(str(a["name"]) for a in raw if isinstance(a, dict) and a.get("name"))
    if not names:
      return NoArtist()
    return MultipleArtists(names=names)
  if isinstance(raw, dict):
    return SingleArtist(name=str(raw.get("name") or ""))
  return NoArtist()


def candidate_from_result(item: dict) -> CandidateTrack:
  album = item.get("album")
  if isinstance(album, dict):
    album_name = str(album.get("name") or "")
  else:
    album_name = str(album or "")

  thumbnail = ""
  thumbnails = item.get("thumbnails") or []
  if thumbnails and isinstance(thumbnails[0], dict):
    thumbnail = str(thumbnails[0].get("url") or "")

  raw_artist = item.get("artists")
  if raw_artist is None:
    raw_artist = item.get("artist")

  return CandidateTrack(
    id=str(item.get("videoId") or ""),
    title=str(item.get("title") or ""),
    artist_field=_artist_field(raw_artist),
    album_name=album_name,
    thumbnail=thumbnail,
  )


def search_candidates(client: YTMusic, descriptor: TrackDescriptor, *, limit: int) -> list[CandidateTrack]:
  q = f"{normalize(descriptor.title)} {descriptor.artist}".strip()
  if not q:
    raise MissingQuery()

  try:
    results = client.search(q, filter="songs", limit=limit)
  except (YTMusicError, requests.RequestException) as e:
    raise UpstreamUnavailable(f"YouTube Music search failed: {e}") from e

  out: list[CandidateTrack] = []
  for item in results or []:
    if not item.get("videoId"):
      continue
    out.append(candidate_from_result(item))
    if len(out) >= limit:
      break

  if not out:
    raise NoResults()
  logger.debug("YouTube Music returned %d candidates for %r", len(out), q)
  return out


def match_query(client: YTMusic, query: str, *, limit: int) -> list[ScoredCandidate]:
  """
  Parse a "<title> : <artist>" query, fetch YouTube Music candidates for it
  and return them ranked by match score.
  """
  if not query:
    raise MissingQuery()
  descriptor = parse_input(query)
  candidates = search_candidates(client, descriptor, limit=limit)
  return match_candidates(descriptor, candidates)
