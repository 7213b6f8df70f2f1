"""
Configuration management and logging setup for Pastel
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .ids import MAX_ID_LENGTH

# Configuration management
CONFIG_DIR = Path(os.environ.get("PASTEL_HOME") or Path.home() / ".pastel")
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Default configuration
DEFAULT_CONFIG = {
    "host": "0.0.0.0",
    "port": 9321,
    "server_url": None,
    "paste_dir": "uploads",
    "hmac_key_file": "hmac_key.txt",
    "log_file": "pastel.log",
    "id_length": 5,
    "key_bytes": 8,
    "max_paste_bytes": 2 * 1024 * 1024,
    "retention_days": 30,
    "sweep_interval_hours": 24,
    "sweeper_enabled": True,
    "highlight_style": "monokai",
}

INT_KEYS = ("port", "id_length", "key_bytes", "max_paste_bytes")
NUMBER_KEYS = ("retention_days", "sweep_interval_hours")
PATH_KEYS = ("paste_dir", "hmac_key_file", "log_file")


def load_config(config_dir: Optional[Path] = None) -> dict:
    """Load configuration from <config_dir>/config.yaml, creating it with defaults if absent"""
    config_dir = Path(config_dir) if config_dir else CONFIG_DIR
    config_file = config_dir / "config.yaml"
    config_dir.mkdir(parents=True, exist_ok=True)

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {config_file}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_file} must contain a mapping")
        config = {**DEFAULT_CONFIG, **{k: v for k, v in loaded.items() if k in DEFAULT_CONFIG}}
    else:
        # Create default config
        with open(config_file, 'w') as f:
            yaml.dump(DEFAULT_CONFIG, f)
        config = dict(DEFAULT_CONFIG)

    return normalize_config(config, config_dir)


def normalize_config(config: dict, config_dir: Path) -> dict:
    """Validate value types and resolve relative paths against config_dir"""
    config = dict(config)
    for key in INT_KEYS:
        value = config[key]
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    if config["id_length"] > MAX_ID_LENGTH:
        raise ConfigError(f"id_length must be at most {MAX_ID_LENGTH}, got {config['id_length']}")
    for key in NUMBER_KEYS:
        value = config[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"{key} must be a positive number, got {value!r}")
    for key in PATH_KEYS:
        path = Path(os.path.expanduser(str(config[key])))
        if not path.is_absolute():
            path = config_dir / path
        config[key] = path
    if config["server_url"]:
        config["server_url"] = str(config["server_url"]).rstrip("/")
    return config


def setup_logging(log_file: Path) -> logging.Logger:
    """Configure the service log"""
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("pastel")
    logger.setLevel(logging.INFO)
    logger.propagate = False  # Prevent propagation to uvicorn logger

    try:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)

        # Log format: timestamp | level | message
        formatter = logging.Formatter('%(asctime)s | %(levelname)s | %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
        file_handler.setFormatter(formatter)

        # Remove existing handlers to avoid duplicates
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.addHandler(file_handler)

        os.chmod(log_file, 0o600)
    except OSError as e:
        print(f"Warning: Failed to setup file logging: {e}", flush=True)

    return logger
