"""Typed configuration loading and access.

The configuration is a read-only snapshot: services receive a ``Config``
and never write back to it. Values come from the ``[gitcc]`` table of a
TOML file; every key is optional.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "PostCommitAction",
    "SmartCheckoutStrategy",
    "default_config_path",
    "load_config",
    "load_config_or_default",
]

type SmartCheckoutStrategy = Literal["ask", "autoStash", "cancel"]
type PostCommitAction = Literal["none", "push", "sync"]

_STRATEGIES: tuple[str, ...] = ("ask", "autoStash", "cancel")
_POST_COMMIT: tuple[str, ...] = ("none", "push", "sync")

REFRESH_INTERVAL_MIN = 5
REFRESH_INTERVAL_MAX = 60
DEFAULT_GROUPING_PREFIXES = ("feature/", "bugfix/", "hotfix/", "release/")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Read-only configuration snapshot."""

    refresh_interval_seconds: int = 10
    pull_rebase: bool = False
    show_remote_branches: bool = True
    branch_grouping_prefixes: tuple[str, ...] = field(default=DEFAULT_GROUPING_PREFIXES)
    confirm_force_push: bool = True
    default_remote: str = "origin"
    commit_template: str = ""
    smart_checkout_strategy: SmartCheckoutStrategy = "ask"
    post_commit_action: PostCommitAction = "none"
    debounce_ms: int = 400
    max_parallel_refresh: int = 4

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a parsed TOML document.

        Unknown or mistyped values fall back to defaults. An invalid enum
        value is a ValueError so the loader can report it.
        """
        section: StrDict = get_table(data, "gitcc") or {}
        defaults = cls()

        strategy = get_str(section, "smart_checkout_strategy") or defaults.smart_checkout_strategy
        if strategy not in _STRATEGIES:
            raise ValueError(f"smart_checkout_strategy must be one of {', '.join(_STRATEGIES)}")
        post_commit = get_str(section, "post_commit_action") or defaults.post_commit_action
        if post_commit not in _POST_COMMIT:
            raise ValueError(f"post_commit_action must be one of {', '.join(_POST_COMMIT)}")

        interval = get_int(section, "refresh_interval_seconds")
        prefixes = get_str_list(section, "branch_grouping_prefixes")
        pull_rebase = get_bool(section, "pull_rebase")
        show_remote = get_bool(section, "show_remote_branches")
        confirm_force = get_bool(section, "confirm_force_push")

        return cls(
            refresh_interval_seconds=_clamp(
                interval if interval is not None else defaults.refresh_interval_seconds,
                REFRESH_INTERVAL_MIN,
                REFRESH_INTERVAL_MAX,
            ),
            pull_rebase=defaults.pull_rebase if pull_rebase is None else pull_rebase,
            show_remote_branches=(
                defaults.show_remote_branches if show_remote is None else show_remote
            ),
            branch_grouping_prefixes=(
                tuple(prefixes) if prefixes is not None else defaults.branch_grouping_prefixes
            ),
            confirm_force_push=(
                defaults.confirm_force_push if confirm_force is None else confirm_force
            ),
            default_remote=get_str(section, "default_remote") or defaults.default_remote,
            commit_template=get_str(section, "commit_template") or defaults.commit_template,
            smart_checkout_strategy=strategy,  # type: ignore[arg-type]
            post_commit_action=post_commit,  # type: ignore[arg-type]
            debounce_ms=max(0, get_int(section, "debounce_ms") or defaults.debounce_ms),
            max_parallel_refresh=max(
                1, get_int(section, "max_parallel_refresh") or defaults.max_parallel_refresh
            ),
        )


def _clamp(value: int, low: int, high: int) -> int:
    return min(high, max(low, value))


def default_config_path() -> Path:
    """Resolve the config path: $GITCC_CONFIG, else ~/.config/gitcc/config.toml."""
    env = os.environ.get("GITCC_CONFIG")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".config" / "gitcc" / "config.toml"


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return the default config on any error."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
