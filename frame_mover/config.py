"""Configuration management for frame mover."""

import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_HASH_CHUNK_SIZE = 64 * 1024
DEFAULT_PROGRESS_INTERVAL = 25
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


class Config:
    """Manages frame mover settings from an optional YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches standard
                locations and falls back to built-in defaults.
        """
        self.config_path = config_path or self._find_config_file()
        self.config: Dict[str, Any] = {}
        if self.config_path:
            self._load_config()

    @staticmethod
    def _search_paths() -> List[Path]:
        return [
            Path.cwd() / "framemover.local.yml",
            Path.cwd() / "framemover.yml",
            Path.home() / ".config" / "framemover" / "config.yml",
        ]

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        for config_file in self._search_paths():
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return str(config_file.resolve())

        logger.debug("No configuration file found, using defaults")
        return None

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path like 'frame_mover.hash_chunk_size'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def is_dry_run(self) -> bool:
        """Check if runs default to dry-run mode."""
        return bool(self.get('frame_mover.dry_run', False))

    def get_hash_chunk_size(self) -> int:
        return self.get('frame_mover.hash_chunk_size', DEFAULT_HASH_CHUNK_SIZE)

    def get_progress_interval(self) -> int:
        """Number of rejected candidates between progress snapshots."""
        return self.get('frame_mover.progress_interval', DEFAULT_PROGRESS_INTERVAL)

    def should_verify_copies(self) -> bool:
        """Check if cross-device copies are re-hashed before the source is deleted."""
        return bool(self.get('frame_mover.verify_copies', True))

    def get_min_free_space_mb(self) -> int:
        return self.get('frame_mover.min_free_space_mb', 0)

    def get_log_level(self) -> str:
        return str(self.get('logging.level', 'INFO')).upper()

    def get_log_dir(self) -> Optional[str]:
        return self.get('logging.log_dir')

    def as_dict(self) -> Dict[str, Any]:
        """Effective settings, defaults included."""
        return {
            'frame_mover': {
                'dry_run': self.is_dry_run(),
                'hash_chunk_size': self.get_hash_chunk_size(),
                'progress_interval': self.get_progress_interval(),
                'verify_copies': self.should_verify_copies(),
                'min_free_space_mb': self.get_min_free_space_mb(),
            },
            'logging': {
                'level': self.get_log_level(),
                'log_dir': self.get_log_dir(),
            },
        }

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages
        """
        errors = []

        chunk_size = self.get_hash_chunk_size()
        if not isinstance(chunk_size, int) or chunk_size < 1:
            errors.append(f"Invalid hash_chunk_size value: {chunk_size} (must be a positive integer)")

        interval = self.get_progress_interval()
        if not isinstance(interval, int) or interval < 0:
            errors.append(f"Invalid progress_interval value: {interval} (must be >= 0)")

        free_space = self.get_min_free_space_mb()
        if not isinstance(free_space, int) or free_space < 0:
            errors.append(f"Invalid min_free_space_mb value: {free_space} (must be >= 0)")

        log_level = self.get_log_level()
        if log_level not in VALID_LOG_LEVELS:
            errors.append(f"Unknown logging level: {log_level}")

        return errors

    def __str__(self) -> str:
        """String representation of configuration."""
        return f"Config(path={self.config_path})"
