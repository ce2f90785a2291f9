"""Hydra-backed loading of solver settings.

The bundled ``conf/config.yaml`` holds the defaults; command line overrides use
Hydra's ``key=value`` syntax (``search.astar.strategy=path_vector``).
"""

import logging
from typing import Any, Dict, List, Optional, Union
from pathlib import Path
from omegaconf import DictConfig, OmegaConf, open_dict
from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra

from .validators import validate_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "conf"

# Most recently loaded configuration, shared with get_config()/get_parameter()
_active_config: Optional[DictConfig] = None

_ABSENT = object()


def _assign(config: DictConfig, changes: Dict[str, Any]) -> None:
    """Write dot-notation keys into ``config``, creating missing keys."""
    with open_dict(config):
        for key, value in changes.items():
            OmegaConf.update(config, key, value)


def _missing_prefix(config: DictConfig, key: str) -> Optional[str]:
    """Shortest prefix of dot-notation ``key`` absent from ``config``, or None if the key exists."""
    parts = key.split(".")
    for depth in range(1, len(parts) + 1):
        prefix = ".".join(parts[:depth])
        if OmegaConf.select(config, prefix, default=_ABSENT) is _ABSENT:
            return prefix
    return None


def _remove(config: DictConfig, key: str) -> None:
    parent_key, _, name = key.rpartition(".")
    parent = OmegaConf.select(config, parent_key) if parent_key else config
    with open_dict(config):
        del parent[name]


class ConfigManager:
    """Composes, validates and edits one solver configuration."""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            config_dir: Directory holding ``config.yaml``; the package's own
                ``conf`` directory when omitted.
        """
        self.config_dir = Path(config_dir or DEFAULT_CONFIG_DIR).resolve()
        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Configuration directory not found: {self.config_dir}")
        self.config: Optional[DictConfig] = None

    def _loaded(self) -> DictConfig:
        if self.config is None:
            raise RuntimeError("No configuration loaded. Call load_config() first.")
        return self.config

    def load_config(self,
                    config_name: str = "config",
                    overrides: Optional[List[str]] = None,
                    validate: bool = True) -> DictConfig:
        """Compose ``config_name`` from the config directory.

        Args:
            config_name: YAML file name without extension
            overrides: Hydra override strings
            validate: Run the validators on the composed result

        Returns:
            The composed configuration, also published as the active one

        Raises:
            ConfigValidationError: If validation is enabled and fails
        """
        global _active_config
        overrides = list(overrides or [])

        # Hydra refuses to initialize twice in one process
        GlobalHydra.instance().clear()
        try:
            with initialize_config_dir(config_dir=str(self.config_dir), version_base=None):
                cfg = compose(config_name=config_name, overrides=overrides)
            if validate:
                validate_config(cfg)
        except Exception as e:
            logger.error(f"Couldn't load configuration '{config_name}' from {self.config_dir}: {e}")
            raise

        self.config = _active_config = cfg
        logger.debug(f"Loaded configuration '{config_name}' with overrides {overrides}")
        return cfg

    def get_config(self) -> Optional[DictConfig]:
        return self.config

    def get_parameter(self, key: str, default: Any = None) -> Any:
        """Look up a dot-notation key, e.g. ``search.astar.strategy``."""
        return OmegaConf.select(self._loaded(), key, default=default)

    def set_parameter(self, key: str, value: Any) -> None:
        self.update_config({key: value})

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Apply several dot-notation assignments at once."""
        _assign(self._loaded(), updates)
        logger.debug(f"Configuration updated: {updates}")

    def to_yaml(self, resolve: bool = True) -> str:
        return OmegaConf.to_yaml(self._loaded(), resolve=resolve)


def load_config(config_name: str = "config",
                overrides: Optional[List[str]] = None,
                config_dir: Optional[Union[str, Path]] = None,
                validate: bool = True) -> DictConfig:
    """Compose a configuration with a throwaway :class:`ConfigManager`."""
    return ConfigManager(config_dir).load_config(config_name, overrides, validate)


def get_config() -> Optional[DictConfig]:
    """The active configuration, or None before the first load."""
    return _active_config


def get_parameter(key: str, default: Any = None) -> Any:
    """Look up a key in the active configuration."""
    if _active_config is None:
        logger.warning(f"No configuration loaded; using default for {key}")
        return default
    return OmegaConf.select(_active_config, key, default=default)


class ConfigContext:
    """Temporarily override keys of the active configuration.

    Example::

        with ConfigContext(**{'search.heuristic': 'zero'}) as cfg:
            ...
    """

    def __init__(self, **changes: Any):
        self.changes = changes
        self.saved: Dict[str, Any] = {}
        self.added: List[str] = []
        self.config = get_config()

    def __enter__(self) -> DictConfig:
        if self.config is None:
            raise RuntimeError("No global configuration loaded")
        self.saved = {}
        self.added = []
        for key in self.changes:
            missing = _missing_prefix(self.config, key)
            if missing is None:
                self.saved[key] = OmegaConf.select(self.config, key)
            elif missing not in self.added:
                self.added.append(missing)
        _assign(self.config, self.changes)
        return self.config

    def __exit__(self, exc_type, exc_val, exc_tb):
        _assign(self.config, self.saved)
        # Keys introduced by the context are dropped rather than reset
        for key in self.added:
            if _missing_prefix(self.config, key) is None:
                _remove(self.config, key)
