"""Game configuration management."""

import logging
from functools import lru_cache
from pathlib import Path

from .schemas import GameConfig
from .utils import load_json

logger = logging.getLogger('fantasy_cricket.config')

CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'game_config.json'


@lru_cache(maxsize=1)
def get_config() -> GameConfig:
    """
    Load game configuration from data/game_config.json.

    Configuration is cached after first load. If the file does not exist
    the built-in defaults are used.

    Returns:
        GameConfig object with validated settings

    Raises:
        ValidationError: If config file has invalid structure

    Example:
        from fantasy_cricket.config import get_config
        config = get_config()
        print(f"Budget: {config.budget_ceiling}")
    """
    if not CONFIG_PATH.exists():
        logger.debug(f'No config at {CONFIG_PATH}, using defaults')
        return GameConfig()
    return load_json(CONFIG_PATH, schema=GameConfig)


def get_budget_ceiling() -> float:
    """Get the maximum total cost of a fantasy team."""
    return get_config().budget_ceiling


def get_max_players_per_real_team() -> int:
    """Get the maximum number of slots drawn from one real team."""
    return get_config().max_players_per_real_team


def get_default_max_members() -> int:
    """Get the member capacity given to leagues created without one."""
    return get_config().default_max_members


def get_default_page_limit() -> int:
    """Get the leaderboard page size used when the caller passes none."""
    return get_config().default_page_limit


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
