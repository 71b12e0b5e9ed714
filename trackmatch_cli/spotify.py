from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

import requests

from trackmatch_cli.config import AppConfig
from trackmatch_cli.errors import MissingQuery, NoResults, UpstreamUnavailable


SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API = "https://api.spotify.com/v1"
SEARCH_PAGE_SIZE = 30
# tokens live an hour; renew five minutes early
REFRESH_MARGIN_SECONDS = 5 * 60

logger = logging.getLogger(__name__)


class SpotifyCredential:
  """
  Client-credentials access token owned by whoever drives the Spotify calls.
  `refresh()` can be called on a schedule; `token()` refreshes lazily when the
  cached token is missing or past its expiry.
  """

  def __init__(self, client_id: str, client_secret: str, *, clock: Callable[[], float] = time.time) -> None:
    self._client_id = client_id
    self._client_secret = client_secret
    self._clock = clock
    self._access_token: str | None = None
    self._expires_at = 0.0

  @classmethod
  def from_config(cls, cfg: AppConfig) -> SpotifyCredential:
    if not cfg.spotify.client_id or not cfg.spotify.client_secret:
      raise RuntimeError(
        "Missing Spotify client credentials. Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET "
        "or run `trackmatch auth spotify`."
      )
    return cls(cfg.spotify.client_id, cfg.spotify.client_secret)

  @property
  def expired(self) -> bool:
    return self._access_token is None or self._clock() >= self._expires_at

  def refresh(self) -> str:
    try:
      r = requests.post(
        SPOTIFY_TOKEN_URL,
        auth=(self._client_id, self._client_secret),
        data={"grant_type": "client_credentials"},
        timeout=30,
      )
      r.raise_for_status()
      data = r.json()
    except requests.RequestException as e:
      raise UpstreamUnavailable(f"Spotify token refresh failed: {e}") from e

    token = data.get("access_token")
    if not token:
      raise UpstreamUnavailable("Spotify token response did not include an access token.")
    expires_in = int(data.get("expires_in") or 3600)
    self._access_token = token
    self._expires_at = self._clock() + max(expires_in - REFRESH_MARGIN_SECONDS, 0)
    logger.info("Spotify token refreshed (expires in %ss)", expires_in)
    return token

  def token(self) -> str:
    if self.expired:
      return self.refresh()
    return self._access_token


@dataclass(frozen=True)
class SpotifyTrack:
  id: str
  title: str
  cover: str
  artist: str

  @property
  def query(self) -> str:
    """Combined query handed to the matcher, "<title> : <artist>"."""
    return f"{self.title} : {self.artist}"


@dataclass(frozen=True)
class SpotifySearchPage:
  items: list[SpotifyTrack]
  next_offset: int
  has_next_page: bool


def _cover(album: dict) -> str:
  images = album.get("images") or []
  # index 2 is the smallest rendition Spotify returns
  for idx in (2, 0):
    if len(images) > idx and images[idx].get("url"):
      return str(images[idx]["url"])
  return ""


def _get(credential: SpotifyCredential, path: str, params: dict | None = None) -> dict:
  token = credential.token()
  try:
    r = requests.get(
      f"{SPOTIFY_API}{path}",
      headers={"Authorization": f"Bearer {token}"},
      params=params,
      timeout=30,
    )
    r.raise_for_status()
    return r.json()
  except requests.RequestException as e:
    raise UpstreamUnavailable(f"Spotify search failed: {e}") from e


def search_tracks(credential: SpotifyCredential, *, query: str, offset: int = 0) -> SpotifySearchPage:
  if not query:
    raise MissingQuery()

  params: dict[str, str | int] = {"q": query, "type": "track", "limit": SEARCH_PAGE_SIZE, "offset": offset}
  data = _get(credential, "/search", params=params)
  tracks = data.get("tracks") or {}
  items = tracks.get("items") or []
  if not items:
    raise NoResults()

  out: list[SpotifyTrack] = []
  for item in items:
    out.append(
      SpotifyTrack(
        id=str(item.get("id") or ""),
        title=str(item.get("name") or ""),
        cover=_cover(item.get("album") or {}),
        artist=", ".join(str(a.get("name") or "") for a in item.get("artists") or []),
      )
    )
  logger.debug("Spotify returned %d tracks for %r (offset %d)", len(out), query, offset)

  return SpotifySearchPage(
    items=out,
    next_offset=offset + SEARCH_PAGE_SIZE,
    has_next_page=tracks.get("next") is not None,
  )
