"""Configuration schemas for MyHub.

Defines dataclasses for all configuration structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RemoteConfig:
    """Settings for remote synchronization."""
    default_name: str = "origin"
    git_executable: str = "git"
    timeout_seconds: int = 120
    push_message: str = "myhub sync"

    @classmethod
    def from_dict(cls, data: dict) -> RemoteConfig:
        """Create RemoteConfig from dictionary."""
        defaults = cls()

        timeout = data.get("timeoutSeconds", defaults.timeout_seconds)
        if not isinstance(timeout, int) or isinstance(timeout, bool) or timeout <= 0:
            timeout = defaults.timeout_seconds

        return cls(
            default_name=_str_or(data.get("defaultName"), defaults.default_name),
            git_executable=_str_or(data.get("gitExecutable"), defaults.git_executable),
            timeout_seconds=timeout,
            push_message=_str_or(data.get("pushMessage"), defaults.push_message),
        )


@dataclass
class IgnoreConfig:
    """Ignore rules contributed by configuration on top of .myhubignore."""
    additional_rules: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> IgnoreConfig:
        """Create IgnoreConfig from dictionary."""
        rules = data.get("additionalRules", [])
        if not isinstance(rules, list):
            rules = []
        return cls(additional_rules=[r for r in rules if isinstance(r, str) and r.strip()])


@dataclass
class HubConfig:
    """Main MyHub configuration."""
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)

    @classmethod
    def from_dict(cls, data: dict) -> HubConfig:
        """Create HubConfig from dictionary."""
        remote_data = data.get("remote", {})
        ignore_data = data.get("ignore", {})
        return cls(
            remote=RemoteConfig.from_dict(remote_data if isinstance(remote_data, dict) else {}),
            ignore=IgnoreConfig.from_dict(ignore_data if isinstance(ignore_data, dict) else {}),
        )


def _str_or(val: object, default: str) -> str:
    if isinstance(val, str) and val.strip():
        return val.strip()
    return default
