"""Tests for configuration management system."""

import pytest
import tempfile
import shutil
from pathlib import Path
from omegaconf import DictConfig, OmegaConf

from ballsort.config import (
    ConfigManager, load_config, get_config, get_parameter, validate_config, ConfigValidationError
)
from ballsort.config.config_manager import ConfigContext, DEFAULT_CONFIG_DIR


class TestConfigManager:
    """Test ConfigManager functionality."""

    @pytest.fixture
    def temp_config_dir(self):
        """Create temporary configuration directory."""
        temp_dir = tempfile.mkdtemp()
        config_dir = Path(temp_dir) / "conf"
        config_dir.mkdir()

        config_content = """
search:
  heuristic: consecutive
  compress: false
  astar:
    strategy: path_vector
    max_nodes_expanded: 500
    max_computation_time: 2.5
    check_monotonic: true
    log_interval: 100

output:
  show_steps: false
"""

        config_file = config_dir / "config.yaml"
        with open(config_file, 'w') as f:
            f.write(config_content)

        yield config_dir

        shutil.rmtree(temp_dir)

    def test_config_manager_initialization(self, temp_config_dir):
        """Test ConfigManager initialization."""
        manager = ConfigManager(temp_config_dir)
        assert manager.config_dir == temp_config_dir.resolve()
        assert manager.config is None

    def test_missing_config_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path / "nowhere")

    def test_load_config_basic(self, temp_config_dir):
        """Test basic configuration loading."""
        manager = ConfigManager(temp_config_dir)
        config = manager.load_config()

        assert isinstance(config, DictConfig)
        assert config.search.heuristic == "consecutive"
        assert config.search.compress is False
        assert config.search.astar.strategy == "path_vector"
        assert config.search.astar.max_nodes_expanded == 500
        assert config.output.show_steps is False
        assert manager.get_config() is config

    def test_load_config_with_overrides(self, temp_config_dir):
        """Test configuration loading with overrides."""
        manager = ConfigManager(temp_config_dir)
        config = manager.load_config(overrides=[
            "search.heuristic=zero",
            "search.astar.max_nodes_expanded=42",
        ])

        assert config.search.heuristic == "zero"
        assert config.search.astar.max_nodes_expanded == 42

    def test_invalid_override_rejected(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        with pytest.raises(ConfigValidationError):
            manager.load_config(overrides=["search.astar.strategy=depth_first"])

    def test_boolean_time_budget_rejected(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        with pytest.raises(ConfigValidationError, match="max_computation_time"):
            manager.load_config(overrides=["search.astar.max_computation_time=true"])

    def test_validation_can_be_skipped(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        config = manager.load_config(overrides=["search.heuristic=unknown"], validate=False)
        assert config.search.heuristic == "unknown"

    def test_get_and_set_parameter(self, temp_config_dir):
        """Test parameter access with dot notation."""
        manager = ConfigManager(temp_config_dir)
        manager.load_config()

        assert manager.get_parameter("search.astar.log_interval") == 100
        assert manager.get_parameter("search.missing", default="fallback") == "fallback"

        manager.set_parameter("search.astar.log_interval", 5)
        assert manager.get_parameter("search.astar.log_interval") == 5

    def test_update_config(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()
        manager.update_config({"search.heuristic": "clutter", "output.extra": 1})

        assert manager.config.search.heuristic == "clutter"
        assert manager.config.output.extra == 1

    def test_parameter_access_requires_loaded_config(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        with pytest.raises(RuntimeError):
            manager.get_parameter("search.heuristic")
        with pytest.raises(RuntimeError):
            manager.set_parameter("search.heuristic", "zero")

    def test_to_yaml(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()
        reloaded = OmegaConf.create(manager.to_yaml())

        assert reloaded.search.astar.strategy == "path_vector"


class TestBundledConfig:
    """Test the configuration shipped with the package."""

    def test_default_dir_exists(self):
        assert (DEFAULT_CONFIG_DIR / "config.yaml").exists()

    def test_defaults(self):
        config = load_config()

        assert config.search.heuristic == "clutter"
        assert config.search.compress is True
        assert config.search.astar.strategy == "backpointer"
        assert config.search.astar.max_nodes_expanded is None
        assert config.search.astar.max_computation_time is None
        assert config.search.astar.check_monotonic is False
        assert config.output.show_steps is True

    def test_global_config(self):
        config = load_config(overrides=["search.heuristic=relaxed"])

        assert get_config() is config
        assert get_parameter("search.heuristic") == "relaxed"
        assert get_parameter("search.unknown", default=3) == 3

    def test_config_context(self):
        load_config()

        with ConfigContext(**{"search.heuristic": "zero"}) as config:
            assert config.search.heuristic == "zero"
        assert get_parameter("search.heuristic") == "clutter"

    def test_config_context_drops_new_keys(self):
        config = load_config()

        with ConfigContext(**{"search.extra": 1, "search.astar.hooks.trace": True}) as active:
            assert active.search.extra == 1
            assert active.search.astar.hooks.trace is True

        assert "extra" not in config.search
        assert "hooks" not in config.search.astar
        assert get_parameter("search.extra", default="gone") == "gone"

    def test_config_context_restores_on_error(self):
        config = load_config()

        with pytest.raises(KeyError):
            with ConfigContext(**{"search.astar.log_interval": 1, "output.extra": "x"}):
                raise KeyError("boom")

        assert config.search.astar.log_interval == 10000
        assert "extra" not in config.output

    def test_config_context_without_loaded_config(self, monkeypatch):
        monkeypatch.setattr("ballsort.config.config_manager._active_config", None)
        with pytest.raises(RuntimeError):
            with ConfigContext(**{"search.heuristic": "zero"}):
                pass


class TestValidation:
    """Test configuration validators."""

    def make_config(self, **astar):
        settings = {
            'strategy': 'backpointer',
            'max_nodes_expanded': None,
            'max_computation_time': None,
            'check_monotonic': False,
            'log_interval': 10000,
        }
        settings.update(astar)
        return OmegaConf.create({
            'search': {'heuristic': 'clutter', 'compress': True, 'astar': settings},
            'output': {'show_steps': True},
        })

    def test_valid_config(self):
        validate_config(self.make_config())
        validate_config(self.make_config(max_nodes_expanded=10, max_computation_time=1))

    def test_empty_config(self):
        validate_config(OmegaConf.create({}))

    @pytest.mark.parametrize('astar', [
        {'strategy': 'bfs'},
        {'max_nodes_expanded': 0},
        {'max_nodes_expanded': 2.5},
        {'max_nodes_expanded': True},
        {'max_computation_time': -1.0},
        {'max_computation_time': 0},
        {'max_computation_time': True},
        {'check_monotonic': 'yes'},
        {'log_interval': -5},
    ])
    def test_invalid_astar_settings(self, astar):
        with pytest.raises(ConfigValidationError):
            validate_config(self.make_config(**astar))

    def test_invalid_heuristic(self):
        config = self.make_config()
        config.search.heuristic = 'manhattan'
        with pytest.raises(ConfigValidationError, match='heuristic'):
            validate_config(config)

    def test_invalid_output(self):
        config = self.make_config()
        config.output.show_steps = 'always'
        with pytest.raises(ConfigValidationError):
            validate_config(config)
