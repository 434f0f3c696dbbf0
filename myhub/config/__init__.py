"""Configuration management for MyHub."""

from .types import (
    HubConfig,
    IgnoreConfig,
    RemoteConfig,
)
from .loader import ConfigLoader

__all__ = [
    "HubConfig",
    "IgnoreConfig",
    "RemoteConfig",
    "ConfigLoader",
]
