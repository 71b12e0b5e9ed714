from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_path


DEFAULT_YTMUSIC_LIMIT = 30


def _mask(value: str | None) -> str:
  if not value:
    return ""
  if len(value) <= 6:
    return "***"
  return f"{value[:3]}***{value[-3:]}"


def _int_or_default(value: str | None, default: int) -> int:
  try:
    parsed = int(value) if value else default
  except ValueError:
    return default
  return parsed if parsed > 0 else default


@dataclass(frozen=True)
class SpotifyConfig:
  client_id: str | None
  client_secret: str | None


@dataclass(frozen=True)
class YTMusicConfig:
  auth_file: str | None
  language: str
  limit: int


@dataclass(frozen=True)
class AppConfig:
  spotify: SpotifyConfig
  ytmusic: YTMusicConfig


def config_dir() -> Path:
  return Path(user_config_path("trackmatch-cli"))


def config_path() -> Path:
  return config_dir() / "config.env"


def _read_env_file(path: Path) -> dict[str, str]:
  values: dict[str, str] = {}
  if not path.exists():
    return values
  for raw in path.read_text(encoding="utf-8").splitlines():
    line = raw.strip()
    if not line or line.startswith("#") or "=" not in line:
      continue
    k, v = line.split("=", 1)
    values[k.strip()] = v.strip()
  return values


def load_config() -> AppConfig:
  """
  Loads from:
  - env vars (preferred for CI / temporary usage)
  - config file at ~/.config/trackmatch-cli/config.env (macOS will differ via platformdirs)
  """
  file_values = _read_env_file(config_path())

  def get(name: str) -> str | None:
    return os.environ.get(name) or file_values.get(name)

  return AppConfig(
    spotify=SpotifyConfig(
      client_id=get("SPOTIFY_CLIENT_ID"),
      client_secret=get("SPOTIFY_CLIENT_SECRET"),
    ),
    ytmusic=YTMusicConfig(
      auth_file=get("YTMUSIC_AUTH_FILE"),
      language=get("YTMUSIC_LANGUAGE") or "en",
      limit=_int_or_default(get("YTMUSIC_LIMIT"), DEFAULT_YTMUSIC_LIMIT),
    ),
  )


def write_config_values(values: dict[str, str | None]) -> Path:
  config_dir().mkdir(parents=True, exist_ok=True)
  path = config_path()

  existing = _read_env_file(path)
  for k, v in values.items():
    if v is None:
      continue
    existing[k] = v

  lines = [
    "# trackmatch-cli config (do not commit)",
    "# You can also set these as env vars instead.",
  ]
  for k in sorted(existing.keys()):
    lines.append(f"{k}={existing[k]}")

  path.write_text("\n".join(lines) + "\n", encoding="utf-8")
  os.chmod(path, 0o600)
  return path


def config_summary(cfg: AppConfig) -> str:
  return "\n".join(
    [
      "Spotify:",
      f"  SPOTIFY_CLIENT_ID={_mask(cfg.spotify.client_id)}",
      f"  SPOTIFY_CLIENT_SECRET={_mask(cfg.spotify.client_secret)}",
      "YouTube Music:",
      f"  YTMUSIC_AUTH_FILE={cfg.ytmusic.auth_file or ''}",
      f"  YTMUSIC_LANGUAGE={cfg.ytmusic.language}",
      f"  YTMUSIC_LIMIT={cfg.ytmusic.limit}",
      f"  Config file={config_path()}",
    ]
  )
