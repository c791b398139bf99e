"""
Centralized configuration handler for the quiz import pipeline.

Loads config/settings.json and merges it over the built-in defaults from
constants.py so every section is always present.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..constants import (
    BOT_DETECTION, DEFAULT_FETCH_AGENTS, DEFAULT_PATHS, ENRICHMENT_DEFAULTS,
    FETCH_DEFAULTS, FINDER_DEFAULTS, LOGGING_DEFAULTS, TIME_LIMITS, USER_AGENTS
)
from ..exceptions import ConfigurationError


def default_settings() -> Dict[str, Any]:
    """Build a fresh copy of the built-in settings."""
    return copy.deepcopy({
        'fetch': {
            'agents': DEFAULT_FETCH_AGENTS,
            'timeout_seconds': FETCH_DEFAULTS['timeout_seconds'],
            'min_bytes': FETCH_DEFAULTS['min_bytes'],
            'platform_min_bytes': FETCH_DEFAULTS['platform_min_bytes'],
            'user_agent': USER_AGENTS[0]
        },
        'finder': {
            'max_depth': FINDER_DEFAULTS['max_depth'],
            'min_valid_ratio': FINDER_DEFAULTS['min_valid_ratio'],
            'weights': FINDER_DEFAULTS['weights'],
            'skip_keys': FINDER_DEFAULTS['skip_keys']
        },
        'detector': {
            'prefix_chars': BOT_DETECTION['prefix_chars']
        },
        'normalizer': {
            'min_time_seconds': TIME_LIMITS['min_seconds'],
            'max_time_seconds': TIME_LIMITS['max_seconds'],
            'blooket_max_options': 4
        },
        'enrichment': ENRICHMENT_DEFAULTS,
        'logging': LOGGING_DEFAULTS,
        'storage': {
            'output_dir': DEFAULT_PATHS['output_dir']
        }
    })


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class ScraperConfig:
    """
    Settings holder for one pipeline instance.

    Sections are exposed through ``section()`` and a few typed accessors;
    lists (such as the agent ladder) replace the defaults wholesale rather
    than merging element by element.
    """

    def __init__(self, config_path: Optional[str] = DEFAULT_PATHS['config_file'],
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize the configuration handler.

        Args:
            config_path: Path to the JSON settings file, None for defaults only
            overrides: Extra settings merged last (used by the CLI and tests)
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = config_path
        self.settings = self._load_settings()
        if overrides:
            _deep_merge(self.settings, copy.deepcopy(overrides))

    @classmethod
    def from_dict(cls, overrides: Dict[str, Any]) -> 'ScraperConfig':
        return cls(config_path=None, overrides=overrides)

    def _load_settings(self) -> Dict[str, Any]:
        """
        Load settings from the configuration file.

        Returns:
            Dictionary with every section filled in

        Raises:
            ConfigurationError: If the settings file is not valid JSON
        """
        settings = default_settings()
        if not self.config_path:
            return settings

        path = Path(self.config_path)
        if not path.exists():
            self.logger.warning(f"Settings file not found: {self.config_path}, using defaults")
            return settings

        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except json.JSONDecodeError as e:
            self.logger.error(f"Failed to load settings from {self.config_path}: {e}")
            raise ConfigurationError(f"Invalid JSON in {self.config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Settings root in {self.config_path} must be an object")

        self.logger.info(f"Successfully loaded settings from {self.config_path}")
        return _deep_merge(settings, loaded)

    def section(self, name: str) -> Dict[str, Any]:
        return self.settings.get(name, {})

    @property
    def fetch_agents(self) -> List[Dict[str, Any]]:
        return list(self.section('fetch').get('agents', []))

    @property
    def timeout_seconds(self) -> float:
        return float(self.section('fetch').get('timeout_seconds', FETCH_DEFAULTS['timeout_seconds']))

    def min_bytes_for(self, platform: str) -> int:
        """Minimum accepted payload size for a platform's fetches."""
        fetch = self.section('fetch')
        per_platform = fetch.get('platform_min_bytes', {})
        return int(per_platform.get(platform, fetch.get('min_bytes', FETCH_DEFAULTS['min_bytes'])))

    @property
    def time_bounds(self):
        normalizer = self.section('normalizer')
        return (
            int(normalizer.get('min_time_seconds', TIME_LIMITS['min_seconds'])),
            int(normalizer.get('max_time_seconds', TIME_LIMITS['max_seconds']))
        )

    def api_key(self, provider: str) -> str:
        """Stock photo API key from settings, falling back to the environment."""
        key = self.section('enrichment').get(f'{provider}_api_key') or ''
        return key or os.environ.get(f'{provider.upper()}_API_KEY', '')
