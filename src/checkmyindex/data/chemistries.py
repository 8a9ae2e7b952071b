"""Chemistry definitions and search defaults.

Configuration comes from chemistries.yaml shipped next to this module. Set
the CHECKMYINDEX_CONFIG environment variable to use another file.
"""

import os
from pathlib import Path
from typing import Optional

import yaml

from ..exceptions import ChemistryConfigError, InvalidInputError
from ..models.chemistry import Chemistry, CompatibilityRule
from ..models.search import SearchSettings

_BASES = ("A", "C", "G", "T")

# Parsed configuration, loaded on first access
_chemistries: Optional[dict[int, Chemistry]] = None
_search_settings: Optional[SearchSettings] = None


def _find_config_path() -> Path:
    """Find the chemistries.yaml config file."""
    env_config = os.environ.get("CHECKMYINDEX_CONFIG")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            return env_path
        raise FileNotFoundError(
            f"CHECKMYINDEX_CONFIG points to a missing file: {env_path}"
        )

    config_path = Path(__file__).parent / "chemistries.yaml"
    if config_path.exists():
        return config_path

    raise FileNotFoundError(f"Could not find chemistries.yaml config file at {config_path}")


def _load_config(path: Optional[Path] = None) -> dict:
    """Load chemistry configuration from a YAML file."""
    config_path = path or _find_config_path()
    with open(config_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ChemistryConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ChemistryConfigError(f"{config_path} must contain a mapping")
    return data


def parse_chemistry(code: int, data: dict) -> Chemistry:
    """Build a Chemistry from its YAML mapping.

    Raises:
        ChemistryConfigError: If a required field is missing or invalid.
    """
    if not isinstance(data, dict):
        raise ChemistryConfigError(f"Chemistry {code} must be a mapping")

    try:
        rule = CompatibilityRule(data.get("rule", ""))
    except ValueError:
        raise ChemistryConfigError(
            f"Chemistry {code}: rule must be one of "
            f"{', '.join(r.value for r in CompatibilityRule)}"
        ) from None

    raw_colors = data.get("base_colors") or {}
    missing = [base for base in _BASES if base not in raw_colors]
    if missing:
        raise ChemistryConfigError(
            f"Chemistry {code}: base_colors is missing bases {', '.join(missing)}"
        )
    base_colors = {
        base: frozenset(str(color) for color in (raw_colors[base] or []))
        for base in _BASES
    }
    if not any(base_colors.values()):
        raise ChemistryConfigError(f"Chemistry {code}: no base emits a color")

    return Chemistry(
        code=code,
        name=str(data.get("name", f"{code}-channel")),
        base_colors=base_colors,
        rule=rule,
        instruments=tuple(str(i) for i in data.get("instruments") or ()),
        base_symbols={str(k): str(v) for k, v in (data.get("base_symbols") or {}).items()},
        forbidden_prefixes=tuple(
            str(p).upper() for p in data.get("forbidden_prefixes") or ()
        ),
    )


def _parse_search_settings(data: dict) -> SearchSettings:
    defaults = SearchSettings()
    values = {}
    for name in (
        "exhaustive_limit",
        "max_random_draws",
        "completion_attempts",
        "core_start_size",
    ):
        value = data.get(name, getattr(defaults, name))
        if not isinstance(value, int) or value < 1:
            raise ChemistryConfigError(f"search.{name} must be a positive integer")
        values[name] = value
    return SearchSettings(**values)


def _initialize_config(path: Optional[Path] = None) -> None:
    """Parse chemistries and search settings from the YAML file."""
    global _chemistries, _search_settings

    config = _load_config(path)
    raw = config.get("chemistries") or {}
    if not isinstance(raw, dict) or not raw:
        raise ChemistryConfigError("Configuration must define at least one chemistry")

    chemistries = {}
    for key, data in raw.items():
        try:
            code = int(key)
        except (TypeError, ValueError):
            raise ChemistryConfigError(f"Chemistry key must be an integer: {key!r}") from None
        chemistries[code] = parse_chemistry(code, data)

    _chemistries = chemistries
    _search_settings = _parse_search_settings(config.get("search") or {})


def reload_config(path: Optional[Path] = None) -> None:
    """Reload configuration from YAML file.

    Call this after modifying the config file (or CHECKMYINDEX_CONFIG) to
    pick up changes.
    """
    _initialize_config(path)


def _get_chemistries() -> dict[int, Chemistry]:
    if _chemistries is None:
        _initialize_config()
    return _chemistries


def get_chemistry_codes() -> list[int]:
    """Configured chemistry codes, sorted."""
    return sorted(_get_chemistries())


def get_chemistry(code: "int | str | Chemistry") -> Chemistry:
    """Get the chemistry for a channel count (1, 2 or 4).

    Raises:
        InvalidInputError: If no chemistry is configured for code.
    """
    if isinstance(code, Chemistry):
        return code
    chemistries = _get_chemistries()
    try:
        return chemistries[int(code)]
    except (KeyError, TypeError, ValueError):
        codes = ", ".join(str(c) for c in sorted(chemistries))
        raise InvalidInputError(
            f"Chemistry must be one of {codes} (got '{code}')."
        ) from None


def get_search_settings() -> SearchSettings:
    """Search defaults from the configuration file."""
    if _search_settings is None:
        _initialize_config()
    return _search_settings
