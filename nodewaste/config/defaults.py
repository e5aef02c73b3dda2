from __future__ import annotations

from nodewaste.config.schema import AppConfig


def default_config() -> AppConfig:
    return AppConfig()
