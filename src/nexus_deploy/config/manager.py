"""Configuration management for nexus-deploy"""

import copy
import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path.home() / ".nexus-deploy" / "config.yaml"


class ConfigError(Exception):
    """Configuration file could not be used"""

    pass


class ConfigManager:
    """Manage nexus-deploy configuration"""

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self.config_path = config_path

    def load(self) -> Dict[str, Any]:
        """Load configuration from file and environment"""
        config = self.defaults()

        if self.config_path.exists():
            with open(self.config_path) as f:
                try:
                    file_config = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigError(f"{self.config_path} must contain a mapping")
            config = merge(config, file_config)

        config = self._apply_env_overrides(config)

        return config

    def save(self, config: Dict[str, Any]) -> None:
        """Save configuration to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False)

    @staticmethod
    def defaults() -> Dict[str, Any]:
        """Built-in configuration"""
        return {
            "host": {
                "os_release": "/etc/os-release",
                "distro_id": "ubuntu",
                "min_os_version": "20.04",
                "min_memory_gb": 4,
                "min_disk_gb": 5,
            },
            "packages": [
                "build-essential",
                "pkg-config",
                "libssl-dev",
                "git",
                "curl",
                "protobuf-compiler",
                "htop",
                "net-tools",
            ],
            "rust": {
                "min_version": "1.80",
                "installer_url": "https://sh.rustup.rs",
                "download_timeout": 60,
            },
            "tuning": {
                "limits_file": "/etc/security/limits.conf",
                "nofile": 65536,
                "sysctl_file": "/etc/sysctl.conf",
                "max_map_count": 262144,
            },
            "project": {
                "root": "",
                "cli_subdir": "clients/cli",
                "binary": "nexus-network",
            },
            "service": {
                "name": "nexus-cli",
                "unit_dir": "/etc/systemd/system",
                "description": "Nexus CLI High Performance Prover",
                "rust_log": "info",
            },
            "system": {
                "use_sudo": True,
            },
            "logging": {
                "level": "info",
            },
        }

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides"""
        if root := os.getenv("NEXUS_DEPLOY_PROJECT_ROOT"):
            config["project"]["root"] = root

        if level := os.getenv("NEXUS_DEPLOY_LOG_LEVEL"):
            config["logging"]["level"] = level.lower()

        if os.getenv("NEXUS_DEPLOY_NO_SUDO", "").lower() in ("1", "true", "yes"):
            config["system"]["use_sudo"] = False

        return config


def merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries"""
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = value

    return result
