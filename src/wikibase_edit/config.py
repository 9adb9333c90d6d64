"""Configuration for connecting to a Wikibase API endpoint.

Settings are looked up in this order:

1. the file named by ``WIKIBASE_CONFIG_PATH``;
2. the path passed by the caller (``--config`` on the command line);
3. ``conf/wikibase.yml`` below the working directory, then
   ``wikibase-edit/wikibase.yml`` in the user config directory
   (``$XDG_CONFIG_HOME``, falling back to ``~/.config``).

Relative paths are resolved against the working directory only.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, cast

from omegaconf import OmegaConf
from pydantic import BaseModel, Field, HttpUrl

CONFIG_PATH_ENV = "WIKIBASE_CONFIG_PATH"
LOCAL_CONFIG_PATH = Path("conf") / "wikibase.yml"
USER_CONFIG_PATH = Path("wikibase-edit") / "wikibase.yml"
REQUIRED_KEYS = ("WIKIBASE_API_URL", "WIKIBASE_SITE_IRI")
DEFAULT_USER_AGENT = "wikibase-edit/0.1 (https://github.com/wikibase-edit/wikibase-edit)"

WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"
WIKIDATA_SITE_IRI = "http://www.wikidata.org/entity/"


def user_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    return Path(base).expanduser() if base else Path.home() / ".config"


def config_search_paths(path: Path | str | None = None) -> tuple[Path, ...]:
    """Return the files ``ApiSettings.from_file`` would try, in order."""
    explicit = os.environ.get(CONFIG_PATH_ENV) or path
    if explicit:
        return (Path.cwd() / Path(explicit).expanduser(),)
    return (Path.cwd() / LOCAL_CONFIG_PATH, user_config_dir() / USER_CONFIG_PATH)


def locate_config(path: Path | str | None = None) -> Path:
    """Return the first existing settings file, or raise ``FileNotFoundError``."""
    candidates = config_search_paths(path)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    checked = "\n".join(f"  {candidate}" for candidate in candidates)
    raise FileNotFoundError(f"No Wikibase settings file found. Checked:\n{checked}")


def read_settings_file(location: Path) -> dict[str, Any]:
    """Load a YAML settings file into a dict with upper-case keys.

    Raises ``ValueError`` if the file is not a mapping or lacks a required key.
    """
    loaded = OmegaConf.to_container(OmegaConf.load(location), resolve=True)
    if not isinstance(loaded, dict):
        raise ValueError(f"Settings file {location} must contain a mapping of settings.")

    values = {str(key).upper(): value for key, value in loaded.items()}
    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    if missing:
        raise ValueError(f"Missing Wikibase settings: {', '.join(missing)}")
    return values


def _text(values: dict[str, Any], key: str) -> str | None:
    value = values.get(key)
    return str(value) if value else None


def _settings_kwargs(values: dict[str, Any]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "api_url": cast(HttpUrl, str(values["WIKIBASE_API_URL"])),
        "site_iri": str(values["WIKIBASE_SITE_IRI"]),
        "username": _text(values, "WIKIBASE_USERNAME"),
        "password": _text(values, "WIKIBASE_PASSWORD"),
    }
    if user_agent := _text(values, "WIKIBASE_USER_AGENT"):
        kwargs["user_agent"] = user_agent
    if values.get("WIKIBASE_TIMEOUT_SECONDS") is not None:
        kwargs["timeout_seconds"] = float(values["WIKIBASE_TIMEOUT_SECONDS"])
    return kwargs


class ApiSettings(BaseModel):
    """Validated settings for one Wikibase site."""

    api_url: HttpUrl = Field(
        description="URL of the MediaWiki action API",
        examples=[WIKIDATA_API_URL],
    )
    site_iri: str = Field(
        min_length=1,
        description="IRI prefix of entities on this site; not contained in API payloads",
        examples=[WIKIDATA_SITE_IRI],
    )
    username: str | None = Field(default=None, description="Account (or bot password) name")
    password: str | None = Field(default=None, description="Account (or bot password) secret")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def has_login(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> ApiSettings:
        """Create settings from the first settings file found by ``locate_config``."""
        return cls(**_settings_kwargs(read_settings_file(locate_config(path))))


def wikidata_settings(**overrides: Any) -> ApiSettings:
    """Return settings for wikidata.org, optionally overriding individual fields."""
    values: dict[str, Any] = {"api_url": WIKIDATA_API_URL, "site_iri": WIKIDATA_SITE_IRI}
    values.update(overrides)
    return ApiSettings(**values)
