"""
tessera configuration management (YAML, layered, env-overridable).
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import yaml

from tessera.core.errors import ConfigError
from tessera.core.utils.io import read_yaml
from tessera.core.utils.merge import deep_merge
from tessera.data import read_yaml as read_data_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "TESSERA_"
PROJECT_CONFIG_DIR = ".tessera"
PROJECT_CONFIG_FILE = "config.yaml"


class ConfigManager:
    """Load and merge tessera configuration.

    Configuration sources (highest to lowest priority):
    1. Explicit ``overrides`` passed to the constructor
    2. Environment variables: TESSERA_<section>__<key>
    3. Project config: <project_root>/.tessera/config.yaml
    4. Bundled defaults: tessera.data/config/defaults.yaml

    The merged mapping is computed once per instance; construct a new
    manager to pick up changes.
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        *,
        env: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.project_root = Path(project_root) if project_root is not None else Path.cwd()
        self.project_config_path = self.project_root / PROJECT_CONFIG_DIR / PROJECT_CONFIG_FILE
        self._env = dict(os.environ if env is None else env)
        self._overrides = overrides or {}
        self._config: Optional[Dict[str, Any]] = None

    # ========== Env coercion ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(self._env):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            segments = raw.split("__")
            if not raw or any(not seg for seg in segments):
                logger.warning("Ignoring malformed %s* variable: %s", ENV_PREFIX, key)
                continue
            yield [seg.lower() for seg in segments], self._coerce_type(self._env[key])

    @staticmethod
    def _set_nested(root: Dict[str, Any], path: List[str], value: Any) -> None:
        current = root
        for part in path[:-1]:
            nxt = current.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                current[part] = nxt
            current = nxt
        current[path[-1]] = value

    # ========== Loading ==========

    def load_config(self) -> Dict[str, Any]:
        """Return the merged configuration mapping (cached per instance).

        Raises:
            ConfigError: If the project config file is unreadable, is not valid
                YAML, or is not a mapping.
        """
        if self._config is not None:
            return self._config

        cfg: Dict[str, Any] = copy.deepcopy(read_data_yaml("config", "defaults.yaml"))

        project_cfg: Any = {}
        if self.project_config_path.exists():
            try:
                project_cfg = read_yaml(self.project_config_path, default={}, raise_on_error=True)
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
                raise ConfigError(
                    f"Cannot read project config: {exc}", path=self.project_config_path
                ) from exc
        if not isinstance(project_cfg, dict):
            raise ConfigError(
                "Project config must be a YAML mapping", path=self.project_config_path
            )
        if project_cfg:
            logger.debug("Loaded project config from %s", self.project_config_path)
            cfg = deep_merge(cfg, project_cfg)

        for path, value in self._iter_env_overrides():
            self._set_nested(cfg, path, value)

        if self._overrides:
            cfg = deep_merge(cfg, self._overrides)

        self._config = cfg
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> manager.get('bundle.primary_document')
            'CLAUDE.md'
            >>> manager.get('nonexistent.key', 'fallback')
            'fallback'
        """
        current: Any = self.load_config()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def section(self, name: str) -> Dict[str, Any]:
        """Return a copy of a top-level config section (empty if absent)."""
        value = self.get(name, {})
        return dict(value) if isinstance(value, dict) else {}


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_DIR", "PROJECT_CONFIG_FILE"]
