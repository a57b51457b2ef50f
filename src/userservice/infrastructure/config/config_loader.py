"""Configuration loader with support for YAML files and environment variables."""

import os
from pathlib import Path
from typing import Optional, Dict, Any, List
import yaml

from .config_models import UserServiceConfig

ENV_PREFIX = "USERSERVICE_"


class ConfigLoader:
    """
    Load and manage userservice configuration.

    Configuration is loaded in the following order (later sources override earlier):
    1. Default configuration (embedded in code)
    2. Global configuration (~/.userservice/config.yaml)
    3. Project configuration (./userservice.yaml or ./.userservice.yaml)
    4. User-specified configuration file
    5. Environment variables (USERSERVICE_*)
    """

    @staticmethod
    def default_config_paths() -> List[Path]:
        """Candidate configuration files, lowest precedence first."""
        return [
            Path.home() / ".userservice" / "config.yaml",
            Path("./userservice.yaml"),
            Path("./.userservice.yaml"),
        ]

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> UserServiceConfig:
        """
        Load configuration from multiple sources.

        Args:
            config_path: Optional path to configuration file

        Returns:
            UserServiceConfig instance

        Raises:
            FileNotFoundError: If config_path is given but does not exist
            ValueError: If a file is not valid YAML
            pydantic.ValidationError: If the merged values are invalid
        """
        config_dict: Dict[str, Any] = {}

        for path in cls.default_config_paths():
            if path.exists():
                config_dict = cls._merge_dicts(
                    config_dict,
                    cls._load_yaml_file(path)
                )

        if config_path:
            user_path = Path(config_path)
            if not user_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            config_dict = cls._merge_dicts(
                config_dict,
                cls._load_yaml_file(user_path)
            )

        config_dict = cls._merge_dicts(
            config_dict,
            cls._load_from_env()
        )

        return UserServiceConfig(**config_dict)

    @staticmethod
    def _load_yaml_file(path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Args:
            path: Path to YAML file

        Returns:
            Configuration dictionary
        """
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
                return data if data else {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}")

    @staticmethod
    def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigLoader._merge_dicts(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _load_from_env() -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        The first underscore after the prefix separates the section from
        the key; double underscores separate deeper levels:
        - USERSERVICE_HTTP_PORT -> http.port
        - USERSERVICE_HTTP_MAX_PAGE_SIZE -> http.max_page_size
        - USERSERVICE_STORAGE_RETRY__MAX_RETRIES -> storage.retry.max_retries

        Values stay strings; the config models coerce them to each field's
        type, so a numeric-looking name or path is kept as text.

        Returns:
            Configuration dictionary from environment
        """
        config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            section, _, rest = key[len(ENV_PREFIX):].lower().partition('_')
            if not section or not rest:
                continue
            key_parts = [section] + rest.split('__')

            current = config
            for part in key_parts[:-1]:
                current = current.setdefault(part, {})

            current[key_parts[-1]] = value

        return config

    @staticmethod
    def create_default_config(path: Optional[str] = None) -> Path:
        """
        Create a default configuration file.

        Args:
            path: Optional path for config file. If not provided, creates in ~/.userservice/

        Returns:
            Path to created configuration file
        """
        if path:
            config_path = Path(path)
            config_path.parent.mkdir(parents=True, exist_ok=True)
        else:
            config_dir = Path.home() / ".userservice"
            config_dir.mkdir(parents=True, exist_ok=True)
            config_path = config_dir / "config.yaml"

        yaml_content = UserServiceConfig().to_yaml()

        yaml_with_comments = f"""# userservice configuration
#
# Override any setting with environment variables (USERSERVICE_<SECTION>_<KEY>)
# or by passing --config at runtime.

{yaml_content}
"""

        config_path.write_text(yaml_with_comments)

        return config_path

    @classmethod
    def get_config_info(cls) -> Dict[str, Any]:
        """
        Get information about configuration sources.

        Returns:
            Dictionary with default paths, existing files and env overrides
        """
        paths = cls.default_config_paths()
        return {
            "default_paths": [str(p) for p in paths],
            "existing_configs": [str(p) for p in paths if p.exists()],
            "env_overrides": sorted(k for k in os.environ if k.startswith(ENV_PREFIX)),
        }
