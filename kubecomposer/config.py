"""
Centralized configuration management for kubecomposer.

Provides a unified interface for accessing environment variables and
configuration with defaults. Only the CLI reads configuration; the emitter,
manifest builders and graph builder receive everything as arguments.
"""

import os
from pathlib import Path
from typing import Optional


class Config:
    """
    Centralized configuration management.

    Provides access to environment variables and configuration with
    sensible defaults.
    """

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get an environment variable with an optional default.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            Environment variable value, the default, or an empty string
        """
        return os.getenv(key, default) or ""

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        """
        Get a boolean environment variable.

        Args:
            key: Environment variable name
            default: Default value if not set or not recognised

        Returns:
            Boolean value
        """
        value = os.getenv(key, "").lower()
        if value in ("true", "1", "yes", "on"):
            return True
        elif value in ("false", "0", "no", "off"):
            return False
        return default

    @staticmethod
    def project_file() -> Path:
        """
        Get the project file to load.

        Checks KUBECOMPOSER_PROJECT_FILE first, then defaults to
        project.json in the current working directory.

        Returns:
            Path to the project file
        """
        env_file = os.getenv("KUBECOMPOSER_PROJECT_FILE")
        if env_file:
            return Path(env_file).resolve()
        return Path.cwd() / "project.json"

    @staticmethod
    def snapshot_path() -> Path:
        """
        Get the path of the autosave snapshot.

        Returns:
            Path from KUBECOMPOSER_SNAPSHOT_PATH, or .kube-composer-autosave.json
            in the current working directory
        """
        env_path = os.getenv("KUBECOMPOSER_SNAPSHOT_PATH")
        if env_path:
            return Path(env_path).resolve()
        return Path.cwd() / ".kube-composer-autosave.json"

    @staticmethod
    def output_dir() -> Optional[Path]:
        """
        Get the directory rendered YAML is written to.

        Returns:
            Path from KUBECOMPOSER_OUTPUT_DIR or None to write to stdout
        """
        env_dir = Config.get("KUBECOMPOSER_OUTPUT_DIR")
        return Path(env_dir).resolve() if env_dir else None

    @staticmethod
    def verbose() -> bool:
        """Whether verbose output is enabled by default."""
        return Config.get_bool("KUBECOMPOSER_VERBOSE")


# Global config instance for convenience
config = Config()
