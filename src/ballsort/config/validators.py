"""Configuration validation for the ball-sort solver."""

import logging
from omegaconf import DictConfig

from ballsort.search.astar import STRATEGIES
from ballsort.search.heuristics import HEURISTICS

logger = logging.getLogger(__name__)

HEURISTIC_NAMES = tuple(HEURISTICS)
STRATEGY_NAMES = STRATEGIES


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""
    pass


def validate_config(config: DictConfig) -> None:
    """Validate the complete configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        validate_search_config(config.get('search', {}))
        validate_output_config(config.get('output', {}))

        logger.debug("Configuration validation passed")

    except Exception as e:
        raise ConfigValidationError(f"Configuration validation failed: {e}")


def validate_search_config(search_config: DictConfig) -> None:
    """Validate search configuration section.

    Args:
        search_config: Search configuration section
    """
    if not search_config:
        return

    heuristic = search_config.get('heuristic', 'clutter')
    if heuristic not in HEURISTIC_NAMES:
        raise ConfigValidationError(
            f"heuristic must be one of {HEURISTIC_NAMES}, got {heuristic}"
        )

    compress = search_config.get('compress', True)
    if not isinstance(compress, bool):
        raise ConfigValidationError(f"compress must be boolean, got {compress}")

    astar_config = search_config.get('astar', {})
    if not astar_config:
        return

    strategy = astar_config.get('strategy', 'backpointer')
    if strategy not in STRATEGY_NAMES:
        raise ConfigValidationError(
            f"astar.strategy must be one of {STRATEGY_NAMES}, got {strategy}"
        )

    max_nodes = astar_config.get('max_nodes_expanded', None)
    if max_nodes is not None and (not isinstance(max_nodes, int) or isinstance(max_nodes, bool)
                                  or max_nodes <= 0):
        raise ConfigValidationError(
            f"astar.max_nodes_expanded must be positive integer or null, got {max_nodes}"
        )

    max_time = astar_config.get('max_computation_time', None)
    if max_time is not None and (not isinstance(max_time, (int, float)) or isinstance(max_time, bool)
                                 or max_time <= 0):
        raise ConfigValidationError(
            f"astar.max_computation_time must be positive number or null, got {max_time}"
        )

    check_monotonic = astar_config.get('check_monotonic', False)
    if not isinstance(check_monotonic, bool):
        raise ConfigValidationError(
            f"astar.check_monotonic must be boolean, got {check_monotonic}"
        )

    log_interval = astar_config.get('log_interval', 10000)
    if not isinstance(log_interval, int) or log_interval < 0:
        raise ConfigValidationError(
            f"astar.log_interval must be non-negative integer, got {log_interval}"
        )


def validate_output_config(output_config: DictConfig) -> None:
    """Validate output configuration section.

    Args:
        output_config: Output configuration section
    """
    if not output_config:
        return

    show_steps = output_config.get('show_steps', True)
    if not isinstance(show_steps, bool):
        raise ConfigValidationError(f"show_steps must be boolean, got {show_steps}")
