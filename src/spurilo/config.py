"""
spurilo configuration loader

This module centralizes *all* configuration handling for spurilo.

Design goals:
- CLI flags override everything.
- Sensible defaults if no config exists.
- Per-machine config without committing personal settings:
    ~/.config/spurilo/config.toml
- Repo-local config:
    <repo_root>/config/config.toml
- Environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by spurilo.analyze.gpx_analyze)
2) Environment variables (SPURILO_*)
3) User config: ~/.config/spurilo/config.toml (or $SPURILO_CONFIG)
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults (the dataclass defaults below)

Values are validated when the typed settings objects are built, so an invalid
threshold or epsilon is rejected before any track is read.

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from spurilo.errors import ConfigurationError

DISTANCE_METHODS = ("geodesic", "haversine")


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise a ConfigurationError
      with a clear, user-facing message.
    """
    if not path.is_file():
        return {}

    try:
        try:
            # Python 3.11+ standard library
            import tomllib
            return tomllib.loads(path.read_text(encoding="utf-8")) or {}
        except ModuleNotFoundError:
            import tomli
            return tomli.loads(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        raise ConfigurationError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "filter.distance_threshold_m")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_bool(v: Any, key: str) -> bool:
    """
    Coerce loosely-typed config values into booleans.

    Accepts common truthy / falsy representations so that TOML and
    environment variables behave consistently.
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    raise ConfigurationError(f"{key}: expected a boolean, got {v!r}")


def _as_float(v: Any, key: str) -> float:
    """Coerce a number or numeric string into a float."""
    if isinstance(v, bool):
        raise ConfigurationError(f"{key}: expected a number, got {v!r}")
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        try:
            return float(v.strip())
        except ValueError:
            pass
    raise ConfigurationError(f"{key}: expected a number, got {v!r}")


def _as_int(v: Any, key: str) -> int:
    """Coerce a whole number (or numeric string) into an int."""
    f = _as_float(v, key)
    if not math.isfinite(f) or not f.is_integer():
        raise ConfigurationError(f"{key}: expected a whole number, got {v!r}")
    return int(f)


def _as_optional_float(v: Any, key: str) -> Optional[float]:
    """Like _as_float, but "auto" / "derived" / "" mean None."""
    if isinstance(v, str) and v.strip().lower() in ("", "auto", "derived"):
        return None
    return _as_float(v, key)


def _as_str(v: Any, key: str) -> str:
    return str(v)


def _as_path(v: Any, key: str) -> Optional[Path]:
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str) and v.strip():
        return Path(v).expanduser()
    return None


def _require(ok: bool, message: str) -> None:
    if not ok:
        raise ConfigurationError(message)


def _finite(v: float) -> bool:
    return isinstance(v, (int, float)) and math.isfinite(v)


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class FilterSettings:
    """
    Noise-filtering policy for raw waypoints.

    A candidate waypoint is kept when it moved more than
    `distance_threshold_m` from the previous kept waypoint, or when its
    elevation changed by more than `elevation_threshold_m`.
    """

    distance_threshold_m: float = 3.0
    elevation_threshold_m: float = 3.0
    distance_method: str = "geodesic"

    def __post_init__(self) -> None:
        _require(_finite(self.distance_threshold_m) and self.distance_threshold_m >= 0,
                 f"distance threshold must be a non-negative number, got {self.distance_threshold_m!r}")
        _require(_finite(self.elevation_threshold_m) and self.elevation_threshold_m >= 0,
                 f"elevation threshold must be a non-negative number, got {self.elevation_threshold_m!r}")
        _require(self.distance_method in DISTANCE_METHODS,
                 f"distance method must be one of {', '.join(DISTANCE_METHODS)}, got {self.distance_method!r}")


@dataclass(frozen=True)
class SimplifySettings:
    """
    Elevation profile simplification.

    epsilon=None derives epsilon from the track's hilliness
    (see spurilo.analyze.simplify.derived_epsilon).
    """

    epsilon: Optional[float] = None
    base_distance: float = 5.0
    preserve_topology: bool = True

    def __post_init__(self) -> None:
        if self.epsilon is not None:
            _require(_finite(self.epsilon) and self.epsilon >= 0,
                     f"epsilon must be a non-negative number, got {self.epsilon!r}")
        _require(_finite(self.base_distance) and self.base_distance > 0,
                 f"base distance must be a positive number, got {self.base_distance!r}")


@dataclass(frozen=True)
class GeocodeSettings:
    """Reverse geocoding of the start location (Photon)."""

    enabled: bool = True
    domain: str = "photon.komoot.io"
    timeout_s: float = 5.0
    language: str = "fr"
    user_agent: str = "spurilo"

    def __post_init__(self) -> None:
        _require(_finite(self.timeout_s) and self.timeout_s > 0,
                 f"geocode timeout must be a positive number, got {self.timeout_s!r}")


@dataclass(frozen=True)
class RenderSettings:
    """Elevation profile image layout."""

    scale_ratio: float = 3.0
    height_px: int = 1000
    line_color: str = "#ff00ff"
    background: str = "white"
    line_width: float = 1.0
    output: Optional[Path] = None

    def __post_init__(self) -> None:
        _require(_finite(self.scale_ratio) and self.scale_ratio > 0,
                 f"scale ratio must be a positive number, got {self.scale_ratio!r}")
        _require(_finite(self.height_px) and self.height_px > 0,
                 f"image height must be a positive number, got {self.height_px!r}")
        _require(_finite(self.line_width) and self.line_width > 0,
                 f"line width must be a positive number, got {self.line_width!r}")


@dataclass(frozen=True)
class SpuriloConfig:
    """
    Fully merged spurilo configuration.

    Attributes:
    - filter / simplify / geocode / render: typed settings per concern
    - source: provenance map showing where each value came from
    """

    filter: FilterSettings = field(default_factory=FilterSettings)
    simplify: SimplifySettings = field(default_factory=SimplifySettings)
    geocode: GeocodeSettings = field(default_factory=GeocodeSettings)
    render: RenderSettings = field(default_factory=RenderSettings)
    source: dict[str, str] = field(default_factory=dict)


# dotted TOML key -> (settings section, field name, coercion)
_KEYS = {
    "filter.distance_threshold_m": ("filter", "distance_threshold_m", _as_float),
    "filter.elevation_threshold_m": ("filter", "elevation_threshold_m", _as_float),
    "filter.distance_method": ("filter", "distance_method", _as_str),
    "simplify.epsilon": ("simplify", "epsilon", _as_optional_float),
    "simplify.base_distance": ("simplify", "base_distance", _as_float),
    "simplify.preserve_topology": ("simplify", "preserve_topology", _as_bool),
    "geocode.enabled": ("geocode", "enabled", _as_bool),
    "geocode.domain": ("geocode", "domain", _as_str),
    "geocode.timeout_s": ("geocode", "timeout_s", _as_float),
    "geocode.language": ("geocode", "language", _as_str),
    "geocode.user_agent": ("geocode", "user_agent", _as_str),
    "render.scale_ratio": ("render", "scale_ratio", _as_float),
    "render.height_px": ("render", "height_px", _as_int),
    "render.line_color": ("render", "line_color", _as_str),
    "render.background": ("render", "background", _as_str),
    "render.line_width": ("render", "line_width", _as_float),
    "render.output": ("render", "output", _as_path),
}

# Environment variable overrides (highest non-CLI precedence)
ENV_MAP = {
    "SPURILO_DISTANCE_THRESHOLD": "filter.distance_threshold_m",
    "SPURILO_ELEVATION_THRESHOLD": "filter.elevation_threshold_m",
    "SPURILO_DISTANCE_METHOD": "filter.distance_method",
    "SPURILO_EPSILON": "simplify.epsilon",
    "SPURILO_GEOCODE": "geocode.enabled",
}


# ---------------------------------------------------------------------------
# Repo discovery
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the spurilo repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SpuriloConfig:
    """
    Load, merge, validate and normalize all spurilo configuration.

    This function is the single authoritative entry point
    for configuration access.

    Raises:
      ConfigurationError for malformed TOML or out-of-range values.
    """
    env = os.environ if environ is None else environ

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        env_cfg = env.get("SPURILO_CONFIG")
        if env_cfg:
            user_config_path = Path(env_cfg).expanduser()
        else:
            user_config_path = Path.home() / ".config" / "spurilo" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    sections: dict[str, dict[str, Any]] = {
        "filter": {}, "simplify": {}, "geocode": {}, "render": {},
    }
    src = {key: "default" for key in _KEYS}

    # Repo, then user: later layers win
    for cfg, label, path in ((repo_cfg, "repo", repo_config_path),
                             (user_cfg, "user", user_config_path)):
        for key, (section, name, coerce) in _KEYS.items():
            v = _deep_get(cfg, key)
            if v is None:
                continue
            sections[section][name] = coerce(v, key)
            src[key] = f"{label}:{path}"

    for var, key in ENV_MAP.items():
        v = env.get(var)
        if v is None or v == "":
            continue
        section, name, coerce = _KEYS[key]
        sections[section][name] = coerce(v, var)
        src[key] = f"env:{var}"

    return SpuriloConfig(
        filter=FilterSettings(**sections["filter"]),
        simplify=SimplifySettings(**sections["simplify"]),
        geocode=GeocodeSettings(**sections["geocode"]),
        render=RenderSettings(**sections["render"]),
        source=src,
    )
