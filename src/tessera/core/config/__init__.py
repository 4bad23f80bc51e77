"""Layered configuration (bundled defaults, project file, environment)."""
from __future__ import annotations

from .manager import ENV_PREFIX, PROJECT_CONFIG_DIR, PROJECT_CONFIG_FILE, ConfigManager

__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_DIR", "PROJECT_CONFIG_FILE"]
