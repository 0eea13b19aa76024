"""Typed configuration loading and access.

``forgepub.toml`` maps onto frozen dataclasses:

    project_name = "project"

    [gitea]
    api = "https://gitea.example.com/api/v1"
    download = "https://gitea.example.com"
    skip_tls_verify = false

    [release]
    owner = "owner"
    name = "repo"
    name_template = "{{ .ProjectName }}_{{ .Version }}"
    draft = false
    prerelease = "auto"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "GiteaURLsConfig",
    "ReleaseConfig",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_NAME_TEMPLATE",
    "DEFAULT_TOKEN_ENV",
    "PrereleaseSetting",
    "load_config",
]

DEFAULT_CONFIG_NAME = "forgepub.toml"
DEFAULT_NAME_TEMPLATE = "{{ .Tag }}"
DEFAULT_TOKEN_ENV = "GITEA_TOKEN"

PrereleaseSetting = bool | Literal["auto"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GiteaURLsConfig:
    """Where the Gitea instance lives.

    ``download`` is the public base for attachment links; empty means "same
    as the instance URL derived from ``api``".
    """

    api: str = ""
    download: str = ""
    skip_tls_verify: bool = False


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    owner: str = ""
    name: str = ""
    name_template: str = DEFAULT_NAME_TEMPLATE
    draft: bool = False
    prerelease: PrereleaseSetting = False


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    project_name: str = ""
    gitea: GiteaURLsConfig = field(default_factory=GiteaURLsConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: ``release.prerelease`` is neither a bool nor "auto".
        """
        gitea: StrDict = get_table(data, "gitea") or {}
        release: StrDict = get_table(data, "release") or {}

        return cls(
            project_name=get_str(data, "project_name") or "",
            gitea=GiteaURLsConfig(
                api=get_str(gitea, "api") or "",
                download=(get_str(gitea, "download") or "").rstrip("/"),
                skip_tls_verify=get_bool(gitea, "skip_tls_verify") or False,
            ),
            release=ReleaseConfig(
                owner=get_str(release, "owner") or "",
                name=get_str(release, "name") or "",
                name_template=get_str(release, "name_template") or DEFAULT_NAME_TEMPLATE,
                draft=get_bool(release, "draft") or False,
                prerelease=_parse_prerelease(release.get("prerelease")),
            ),
        )


def _parse_prerelease(value: object) -> PrereleaseSetting:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if value == "auto":
        return "auto"
    raise ValueError(f"release.prerelease must be true, false or \"auto\", got {value!r}")


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate ``forgepub.toml``.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))

    if not config.gitea.api:
        return Err(ConfigError("Missing required key: gitea.api", path=path))
    if not config.release.owner or not config.release.name:
        return Err(ConfigError("Missing required keys: release.owner and release.name", path=path))
    return Ok(config)
