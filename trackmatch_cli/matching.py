from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from trackmatch_cli.tracks import CandidateTrack, TrackDescriptor, resolve_artist


TITLE_TOKEN_HIT = 5
TITLE_TOKEN_MISS = -5
ARTIST_FORWARD_HIT = 15
ARTIST_REVERSE_HIT = 20
ARTIST_TOKEN_MISS = -5
TITLE_SIMILAR = 15
ARTIST_SIMILAR = 10
SIMILARITY_THRESHOLD = 0.8

_re_credit_clause = re.compile(r"(\s*)\(\s*(?:prod|feat|ft)\..*?\)(\s*)", re.IGNORECASE)
_re_brackets = re.compile(r"[\[\]()]")
_re_whitespace = re.compile(r"\s+")


def _drop_clause(m: re.Match) -> str:
  # surrounding whitespace collapses to one space; a clause glued to both neighbours leaves nothing
  return " " if m.group(1) or m.group(2) else ""


def normalize(text: str) -> str:
  # only the first credit clause goes; later ones keep their text
  s = _re_credit_clause.sub(_drop_clause, text or "", count=1)
  s = _re_brackets.sub("", s)
  return s.lower().strip()


def bigram_similarity(a: str, b: str) -> float:
  """
  Dice coefficient over character bigrams, ignoring whitespace.
  Returns a value in [0, 1]; empty input never counts as similar.
  """
  first = _re_whitespace.sub("", a or "")
  second = _re_whitespace.sub("", b or "")
  if not first or not second:
    return 0.0
  if first == second:
    return 1.0
  if len(first) < 2 or len(second) < 2:
    return 0.0

  bigrams = Counter(first[i : i + 2] for i in range(len(first) - 1))
  overlap = 0
  for i in range(len(second) - 1):
    bigram = second[i : i + 2]
    if bigrams[bigram] > 0:
      bigrams[bigram] -= 1
      overlap += 1
  return (2.0 * overlap) / (len(first) + len(second) - 2)


def _overlap(tokens: list[str], other: str, *, hit: int, miss: int) -> int:
  total = 0
  for token in tokens:
    total += hit if token and token in other else miss
  return total


def _title_tokens(title: str) -> list[str]:
  return _re_whitespace.split(title)


def _artist_tokens(artist: str) -> list[str]:
  return artist.split(",")


def _similarity_points(a: str, b: str, points: int) -> int:
  return points if bigram_similarity(a, b) > SIMILARITY_THRESHOLD else -points


def score(descriptor: TrackDescriptor, candidate: CandidateTrack) -> int:
  title_a = normalize(descriptor.title)
  title_b = normalize(candidate.title)
  artist_a = descriptor.artist or ""
  artist_b = resolve_artist(candidate) or ""

  total = 0
  total += _overlap(_title_tokens(title_a), title_b, hit=TITLE_TOKEN_HIT, miss=TITLE_TOKEN_MISS)
  total += _overlap(_title_tokens(title_b), title_a, hit=TITLE_TOKEN_HIT, miss=TITLE_TOKEN_MISS)
  total += _overlap(_artist_tokens(artist_a), artist_b, hit=ARTIST_FORWARD_HIT, miss=ARTIST_TOKEN_MISS)
  total += _overlap(_artist_tokens(artist_b), artist_a, hit=ARTIST_REVERSE_HIT, miss=ARTIST_TOKEN_MISS)
  total += _similarity_points(title_a, title_b, TITLE_SIMILAR)
  total += _similarity_points(artist_a, artist_b, ARTIST_SIMILAR)
  return total


@dataclass(frozen=True)
class ScoredCandidate:
  candidate: CandidateTrack
  resolved_artist: str
  score: int

  def to_record(self) -> dict:
    return {
      "id": self.candidate.id,
      "title": self.candidate.title,
      "resolvedArtist": self.resolved_artist,
      "thumbnail": self.candidate.thumbnail,
      "score": self.score,
    }


def rank(scored: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
  # sorted() is stable with reverse=True, so ties keep upstream order
  return sorted(scored, key=lambda s: s.score, reverse=True)


def match_candidates(descriptor: TrackDescriptor, candidates: Iterable[CandidateTrack]) -> list[ScoredCandidate]:
  scored = [
    ScoredCandidate(candidate=c, resolved_artist=resolve_artist(c), score=score(descriptor, c))
    for c in candidates
  ]
  return rank(scored)
