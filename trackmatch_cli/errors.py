from __future__ import annotations


class MissingQuery(RuntimeError):
  def __init__(self, message: str = "Missing query.") -> None:
    super().__init__(message)


class NoResults(RuntimeError):
  def __init__(self, message: str = "No results found.") -> None:
    super().__init__(message)


class UpstreamUnavailable(RuntimeError):
  """Upstream catalog could not be reached or returned an error."""
