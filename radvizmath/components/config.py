"""
Configuration management for RadViz math.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
"""

import os
import json
import logging
import threading
from typing import Dict, List, Optional, Any
from copy import deepcopy
import yaml

# Set up logging
logger = logging.getLogger(__name__)


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_bool(value: Any) -> Optional[bool]:
    """
    Convert a value to a boolean.

    Args:
        value: Value to convert

    Returns:
        Boolean value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return bool(value)

    if isinstance(value, str):
        value = value.lower().strip()
        if value in ('true', 'yes', 'y', '1', 't'):
            return True
        if value in ('false', 'no', 'n', '0', 'f'):
            return False

    return None


def to_list(value: Any, separator: str = ',') -> Optional[List[str]]:
    """
    Convert a value to a list.

    Args:
        value: Value to convert
        separator: Separator for string values

    Returns:
        List value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, list):
        return value

    if isinstance(value, str):
        return [item.strip() for item in value.split(separator) if item.strip()]

    return None


def read_config_file(filepath: str) -> Dict[str, Any]:
    """
    Read a JSON or YAML configuration file.

    Args:
        filepath: Path ending in .json, .yaml or .yml

    Returns:
        Configuration dictionary
    """
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f) or {}
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported file format: {filepath}")


class Config:
    """
    Configuration manager for RadViz math.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            # Start with default configuration
            config = self._get_defaults()

            # Apply environment variables
            config = self._apply_env_vars(config)

            # Apply overrides
            if overrides:
                config = self._apply_overrides(config, overrides)

            # Apply inferred values
            config = self._apply_inferred_values(config)

            # Store configuration
            self._config = config
            self._initialized = True

            logger.info("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # Environment
            'radviz-env': 'dev',

            # Similarity between variables
            'similarity': {
                'metric': 'cosine'       # cosine or abs-pearson
            },

            # Anchor search
            'optimizer': {
                'measure': 'independent',   # independent or dependent
                'max-iterations': 100,
                'samples-per-iteration': 50,
                'patience': 20,             # rounds without improvement
                'n-swaps': 1,               # position swaps per candidate
                'n-workers': 1,             # threads scoring candidates
                'seed': None
            },

            # Hierarchical ordering
            'hierarchy': {
                'optimal-leaf-order': False
            },

            # Anchor layout
            'layout': {
                'label-offset': 0.1
            },

            # Output
            'output': {
                'canonicalize': False
            },

            # Logging
            'logging': {
                'level': 'warn'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Environment
        if 'RADVIZ_ENV' in os.environ:
            config['radviz-env'] = os.environ['RADVIZ_ENV']

        # Similarity
        config['similarity']['metric'] = os.environ.get('RADVIZ_SIMILARITY_METRIC', config['similarity']['metric'])

        # Optimizer
        optimizer = config['optimizer']
        optimizer['measure'] = os.environ.get('RADVIZ_MEASURE', optimizer['measure'])
        optimizer['max-iterations'] = to_int(os.environ.get('RADVIZ_MAX_ITERATIONS', optimizer['max-iterations']))
        optimizer['samples-per-iteration'] = to_int(os.environ.get('RADVIZ_SAMPLES', optimizer['samples-per-iteration']))
        optimizer['patience'] = to_int(os.environ.get('RADVIZ_PATIENCE', optimizer['patience']))
        optimizer['n-swaps'] = to_int(os.environ.get('RADVIZ_N_SWAPS', optimizer['n-swaps']))
        optimizer['n-workers'] = to_int(os.environ.get('RADVIZ_N_WORKERS', optimizer['n-workers']))
        optimizer['seed'] = to_int(os.environ.get('RADVIZ_SEED', optimizer['seed']))

        # Output
        config['output']['canonicalize'] = to_bool(
            os.environ.get('RADVIZ_CANONICALIZE', config['output']['canonicalize'])
        )

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Helper function for deep update
        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        # Apply overrides
        return deep_update(config, overrides)

    def _apply_inferred_values(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply inferred configuration values.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Production runs should be reproducible
        if config['radviz-env'] == 'prod' and config['optimizer'].get('seed') is None:
            config['optimizer']['seed'] = 0

        return config

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        # Split path into components
        components = path.split('.')

        # Start with full configuration
        value = self._config

        # Traverse path
        for component in components:
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            # Split path into components
            components = path.split('.')

            # Start with full configuration
            config = self._config

            # Traverse path
            for component in components[:-1]:
                if component not in config:
                    config[component] = {}

                config = config[component]

            # Set value
            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if not self._initialized:
            self.load_config()

        # Determine file format from extension
        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Args:
            filepath: Path to load configuration from
        """
        self.load_config(read_config_file(filepath))


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared configuration instance."""
        with cls._lock:
            cls._instance = None
