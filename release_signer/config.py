"""Configuration file loading and validation."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List

from .properties import DEFAULT_CREDENTIALS_FILE
from .resolver import DEBUG, ON_MISSING_CHOICES, ON_MISSING_DEBUG, RELEASE

CONFIG_FILENAME = ".release-signer.yaml"

DEFAULT_APPLICATION_ID = "com.petshelter.rushgame"
DEFAULT_JAVA_VERSION = 17

DEFAULT_BUILD_TYPES: Dict[str, Dict[str, Any]] = {
    RELEASE: {
        "minify_enabled": True,
        "shrink_resources": True,
        "proguard_files": ["proguard-android-optimize.txt", "proguard-rules.pro"],
        "on_missing_credentials": ON_MISSING_DEBUG,
    },
    DEBUG: {
        "minify_enabled": False,
        "shrink_resources": False,
        "proguard_files": [],
    },
}

FRAMEWORK_KEYS = {
    "compile_sdk": int,
    "ndk_version": str,
    "min_sdk": int,
    "target_sdk": int,
    "version_code": int,
    "version_name": str,
}

BACKEND_NAMES = ("apksigner", "jarsigner")


class ConfigError(Exception):
    """Configuration validation error."""
    pass


class ProjectConfig:
    """Configuration for resolving and signing one Android project."""

    def __init__(self, data: Dict[str, Any]):
        """
        Initialize configuration from dictionary.

        Args:
            data: Configuration dictionary from YAML
        """
        self.data = data
        self._validate()

    def _validate(self) -> None:
        """Validate configuration schema."""
        for key in ("application_id", "namespace", "credentials_file"):
            if key in self.data and not isinstance(self.data[key], str):
                raise ConfigError(f"{key} must be a string")

        if "java_version" in self.data:
            java_version = self.data["java_version"]
            if isinstance(java_version, bool) or not isinstance(java_version, int):
                raise ConfigError("java_version must be an integer")

        if "framework" in self.data:
            framework = self.data["framework"]
            if not isinstance(framework, dict):
                raise ConfigError("framework must be a dictionary")

            for key, value in framework.items():
                if key not in FRAMEWORK_KEYS:
                    raise ConfigError(f"framework.{key} is not a known setting")
                expected = FRAMEWORK_KEYS[key]
                if isinstance(value, bool) or not isinstance(value, expected):
                    raise ConfigError(
                        f"framework.{key} must be {'an integer' if expected is int else 'a string'}"
                    )

        if "build_types" in self.data:
            build_types = self.data["build_types"]
            if not isinstance(build_types, dict):
                raise ConfigError("build_types must be a dictionary")

            for name, settings in build_types.items():
                if not isinstance(settings, dict):
                    raise ConfigError(f"build_types.{name} must be a dictionary")

                for flag in ("minify_enabled", "shrink_resources"):
                    if flag in settings and not isinstance(settings[flag], bool):
                        raise ConfigError(f"build_types.{name}.{flag} must be boolean")

                if "proguard_files" in settings:
                    files = settings["proguard_files"]
                    if not isinstance(files, list) or not all(
                        isinstance(f, str) for f in files
                    ):
                        raise ConfigError(
                            f"build_types.{name}.proguard_files must be a list of strings"
                        )

                if "on_missing_credentials" in settings:
                    if settings["on_missing_credentials"] not in ON_MISSING_CHOICES:
                        raise ConfigError(
                            f"build_types.{name}.on_missing_credentials must be one of "
                            f"{', '.join(ON_MISSING_CHOICES)}"
                        )

        for name in self.get_build_type_names():
            settings = self.get_build_type_config(name)
            if settings["shrink_resources"] and not settings["minify_enabled"]:
                raise ConfigError(
                    f"build_types.{name}.shrink_resources requires minify_enabled"
                )

        if "backends" in self.data:
            backends = self.data["backends"]
            if not isinstance(backends, dict):
                raise ConfigError("backends must be a dictionary")

            for backend_name, backend_config in backends.items():
                if backend_name not in BACKEND_NAMES:
                    raise ConfigError(f"backends.{backend_name} is not a known backend")
                if not isinstance(backend_config, dict):
                    raise ConfigError(
                        f"backends.{backend_name} must be a dictionary"
                    )
                if "path" in backend_config and not isinstance(backend_config["path"], str):
                    raise ConfigError(f"backends.{backend_name}.path must be a string")

    @property
    def application_id(self) -> str:
        return self.data.get("application_id", DEFAULT_APPLICATION_ID)

    @property
    def namespace(self) -> str:
        return self.data.get("namespace", self.application_id)

    @property
    def java_version(self) -> int:
        return self.data.get("java_version", DEFAULT_JAVA_VERSION)

    @property
    def credentials_file(self) -> str:
        return self.data.get("credentials_file", DEFAULT_CREDENTIALS_FILE)

    def get_framework_values(self) -> Dict[str, Any]:
        """
        Get values supplied by the enclosing framework (SDK levels, version).

        Returns:
            Dictionary with every framework key; unset keys map to None
        """
        framework = self.data.get("framework", {})
        return {key: framework.get(key) for key in FRAMEWORK_KEYS}

    def get_build_type_names(self) -> List[str]:
        """Get build type names, defaults first."""
        names = list(DEFAULT_BUILD_TYPES)
        for name in self.data.get("build_types", {}):
            if name not in names:
                names.append(name)
        return names

    def get_build_type_config(self, name: str) -> Dict[str, Any]:
        """
        Get settings for a build type, merged over the built-in defaults.

        Args:
            name: Build type name (e.g., "release", "debug")

        Returns:
            Build type settings dictionary
        """
        settings = copy.deepcopy(DEFAULT_BUILD_TYPES.get(name, DEFAULT_BUILD_TYPES[DEBUG]))
        settings.update(self.data.get("build_types", {}).get(name, {}))
        return settings

    def get_on_missing_credentials(self) -> str:
        """Get the release policy for a missing credentials file."""
        return self.get_build_type_config(RELEASE)["on_missing_credentials"]

    def get_backend_config(self, backend_name: str) -> Dict[str, Any]:
        """
        Get configuration for specific backend.

        Args:
            backend_name: Name of backend (e.g., "apksigner", "jarsigner")

        Returns:
            Backend configuration dictionary
        """
        return self.data.get("backends", {}).get(backend_name, {})

    def apply_environment_overrides(self) -> "ProjectConfig":
        """
        Apply environment variable overrides.

        Environment variables:
        - RELEASE_SIGNER_CREDENTIALS_FILE: Override credentials file name
        - RELEASE_SIGNER_ON_MISSING_CREDENTIALS: Override release policy
        - RELEASE_SIGNER_APKSIGNER: Override apksigner executable
        - RELEASE_SIGNER_JARSIGNER: Override jarsigner executable

        Returns:
            New ProjectConfig with environment overrides applied
        """
        merged = copy.deepcopy(self.data)

        credentials_file = os.getenv("RELEASE_SIGNER_CREDENTIALS_FILE")
        if credentials_file:
            merged["credentials_file"] = credentials_file

        on_missing = os.getenv("RELEASE_SIGNER_ON_MISSING_CREDENTIALS")
        if on_missing:
            merged.setdefault("build_types", {}).setdefault(RELEASE, {})
            merged["build_types"][RELEASE]["on_missing_credentials"] = on_missing

        for backend_name in BACKEND_NAMES:
            tool_path = os.getenv(f"RELEASE_SIGNER_{backend_name.upper()}")
            if tool_path:
                merged.setdefault("backends", {}).setdefault(backend_name, {})
                merged["backends"][backend_name]["path"] = tool_path

        return ProjectConfig(merged)


def load_config(config_path: str) -> ProjectConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        ProjectConfig instance

    Raises:
        ConfigError: If config file is invalid
        FileNotFoundError: If config file doesn't exist
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping")

    return ProjectConfig(data)


def find_default_config(start: Optional[Path] = None) -> Optional[Path]:
    """
    Find default configuration file.

    Searches for .release-signer.yaml in:
    1. The start directory (default: current directory)
    2. Parent directories up to git root
    3. Home directory

    Returns:
        Path to config file, or None if not found
    """
    current = Path(start) if start else Path.cwd()
    current = current.resolve()
    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            return config_path

        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_default_config(start: Optional[Path] = None) -> ProjectConfig:
    """
    Load configuration from default location.

    Returns:
        ProjectConfig from the discovered file, or built-in defaults
    """
    config_path = find_default_config(start)
    if config_path:
        return load_config(str(config_path))
    return ProjectConfig({})
