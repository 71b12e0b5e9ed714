from __future__ import annotations

from dataclasses import dataclass
from typing import Union


QUERY_DELIMITER = " : "


@dataclass(frozen=True)
class TrackDescriptor:
  title: str
  artist: str


@dataclass(frozen=True)
class NoArtist:
  pass


@dataclass(frozen=True)
class SingleArtist:
  name: str


@dataclass(frozen=True)
class MultipleArtists:
  names: tuple[str, ...]


ArtistField = Union[NoArtist, SingleArtist, MultipleArtists]


@dataclass(frozen=True)
class CandidateTrack:
  id: str
  title: str
  artist_field: ArtistField
  album_name: str
  thumbnail: str


def parse_input(query: str) -> TrackDescriptor:
  """
  Split a combined "<title> : <artist>" query. No trimming is done here;
  normalization happens at scoring time.
  """
  parts = query.split(QUERY_DELIMITER)
  title = parts[0]
  artist = parts[1] if len(parts) > 1 else ""
  return TrackDescriptor(title=title, artist=artist)


def resolve_artist(candidate: CandidateTrack) -> str:
  field = candidate.artist_field
  if isinstance(field, MultipleArtists) and field.names:
    return ",".join(field.names)
  if isinstance(field, SingleArtist):
    return field.name
  # NoArtist, or a list that came through empty
  return candidate.album_name
