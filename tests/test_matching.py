import pytest

from trackmatch_cli.matching import (
  ScoredCandidate,
  bigram_similarity,
  match_candidates,
  normalize,
  rank,
  score,
)
from trackmatch_cli.tracks import CandidateTrack, MultipleArtists, NoArtist, SingleArtist, TrackDescriptor


def _candidate(title, artist, *, id="vid", album_name="", thumbnail="thumb.jpg"):
  field = SingleArtist(name=artist) if artist is not None else NoArtist()
  return CandidateTrack(id=id, title=title, artist_field=field, album_name=album_name, thumbnail=thumbnail)


def test_normalize_strips_credit_clause_and_brackets():
  assert normalize("Song (feat. Artist) [Remix]") == "song remix"


def test_normalize_only_strips_first_credit_clause():
  assert normalize("Track (Prod. Metro) (feat. Future)") == "track feat. future"


@pytest.mark.parametrize("text", ["Song (ft. Someone)", "Song ( prod. Someone)", "Song (FEAT. Someone)"])
def test_normalize_credit_prefixes_are_case_insensitive(text):
  assert normalize(text) == "song"


def test_normalize_plain_title():
  assert normalize("  Plain Title ") == "plain title"
  assert normalize("") == ""


def test_normalize_keeps_other_parenthesized_text():
  assert normalize("Blinding Lights (Live)") == "blinding lights live"


@pytest.mark.parametrize(
  "text",
  ["Song (feat. Artist) [Remix]", "Track (Prod. Metro) (feat. Future)", "((x))", "Already normal", " [A] (B) "],
)
def test_normalize_is_idempotent(text):
  once = normalize(text)
  assert normalize(once) == once


def test_bigram_similarity_bounds():
  assert bigram_similarity("blinding lights", "Blinding Lights".lower()) == 1.0
  assert bigram_similarity("", "anything") == 0.0
  assert bigram_similarity("", "") == 0.0
  assert bigram_similarity("a", "b") == 0.0


def test_bigram_similarity_counts_shared_bigrams():
  # ni ig gh ht vs na ac ch ht: one shared bigram
  assert bigram_similarity("night", "nacht") == pytest.approx(0.25)
  assert bigram_similarity("blinding lights", "blinding lights live") == pytest.approx(26 / 30)


def test_bigram_similarity_ignores_whitespace():
  assert bigram_similarity("the weeknd", "theweeknd") == 1.0


def test_exact_match_scores_every_bonus():
  d = TrackDescriptor(title="Blinding Lights", artist="The Weeknd")
  assert score(d, _candidate("Blinding Lights", "The Weeknd")) == 80


def test_live_cover_scores_lower():
  d = TrackDescriptor(title="Blinding Lights", artist="The Weeknd")
  # +10 +5 title tokens, -5 -5 artist tokens, +15 title similarity, -10 artist similarity
  assert score(d, _candidate("Blinding Lights (Live)", "Cover Band")) == 10


def test_artist_weights_are_asymmetric():
  forward = score(TrackDescriptor(title="Song", artist="Drake"), _candidate("Song", "Drake Jr"))
  swapped = score(TrackDescriptor(title="Song", artist="Drake Jr"), _candidate("Song", "Drake"))
  assert forward == 25
  assert swapped == 30
  assert forward != swapped


def test_multi_artist_list_is_compared_as_joined_string():
  d = TrackDescriptor(title="Song", artist="A, B")
  c = CandidateTrack(id="x", title="Song", artist_field=MultipleArtists(names=("A", "B")), album_name="", thumbnail="")
  # forward: "A" hit +15, " B" not in "A,B" -5; reverse: "A" +20, "B" +20
  # artist similarity "A,B" vs "A,B" after whitespace removal is 1.0
  assert score(d, c) == 25 + 15 - 5 + 20 + 20 + 10


def test_empty_candidate_fields_take_penalty_branches():
  d = TrackDescriptor(title="Blinding Lights", artist="The Weeknd")
  result = score(d, _candidate("", ""))
  assert result == -10 - 5 - 5 - 5 - 15 - 10


def test_missing_descriptor_artist_degrades_to_mismatch():
  d = TrackDescriptor(title="Blinding Lights", artist="")
  result = score(d, _candidate("Blinding Lights", "The Weeknd"))
  assert result == 20 + 15 - 5 - 5 - 10


def test_no_artist_candidate_uses_album_name():
  d = TrackDescriptor(title="Song", artist="Greatest Hits")
  c = _candidate("Song", None, album_name="Greatest Hits")
  assert score(d, c) == 70


def test_rank_is_stable_for_equal_scores():
  first = ScoredCandidate(candidate=_candidate("A", "x", id="1"), resolved_artist="x", score=5)
  second = ScoredCandidate(candidate=_candidate("B", "x", id="2"), resolved_artist="x", score=5)
  top = ScoredCandidate(candidate=_candidate("C", "x", id="3"), resolved_artist="x", score=9)
  ranked = rank([first, second, top])
  assert [r.candidate.id for r in ranked] == ["3", "1", "2"]


def test_rank_keeps_every_candidate():
  items = [
    ScoredCandidate(candidate=_candidate("T", "x", id=str(i)), resolved_artist="x", score=s)
    for i, s in enumerate([-40, 3, 3, -40, 12])
  ]
  ranked = rank(items)
  assert len(ranked) == len(items)
  assert [r.candidate.id for r in ranked] == ["4", "1", "2", "0", "3"]


def test_match_candidates_ranks_exact_recording_first():
  d = TrackDescriptor(title="Blinding Lights", artist="The Weeknd")
  cover = _candidate("Blinding Lights (Live)", "Cover Band", id="b")
  exact = _candidate("Blinding Lights", "The Weeknd", id="a")
  ranked = match_candidates(d, [cover, exact])
  assert [r.candidate.id for r in ranked] == ["a", "b"]
  assert ranked[0].score > ranked[1].score


def test_to_record_shape():
  d = TrackDescriptor(title="Blinding Lights", artist="The Weeknd")
  ranked = match_candidates(d, [_candidate("Blinding Lights", "The Weeknd", id="a")])
  assert ranked[0].to_record() == {
    "id": "a",
    "title": "Blinding Lights",
    "resolvedArtist": "The Weeknd",
    "thumbnail": "thumb.jpg",
    "score": 80,
  }


def test_normalize_clause_glued_to_both_neighbours_leaves_nothing():
  assert normalize("Song(feat. X)Remix") == "songremix"


def test_normalize_clause_with_space_on_one_side():
  assert normalize("Song(feat. X) Remix") == "song remix"
  assert normalize("Song (feat. X)Remix") == "song remix"
