"""Configuration management for the evacuation router."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class ControllerConfig:
    """Recompute controller settings."""

    # Persistence retry policy: delay after failed attempt i is base_delay * 2**i
    max_attempts: int = 5
    base_delay: float = 1.0
    # Pause before each persistence write, in seconds
    commit_delay: float = 1.0
    # Distance represented by one grid cell in instructions
    meters_per_cell: int = 10


@dataclass
class ExportConfig:
    """JSON export sink configuration."""

    enabled: bool = True
    path: str = "./data/current_map.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration container."""

    controller: ControllerConfig = field(default_factory=ControllerConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. Defaults to config/default.yaml

    Returns:
        Populated Config dataclass
    """
    if config_path is None:
        # Look for config in standard locations
        candidates = [
            Path("config/default.yaml"),
            Path(__file__).parent.parent / "config" / "default.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                config_path = str(candidate)
                break

    config = Config()

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            data = yaml.safe_load(f)

        if data:
            if "controller" in data:
                config.controller = ControllerConfig(**data["controller"])
            if "export" in data:
                config.export = ExportConfig(**data["export"])
            if "logging" in data:
                config.logging = LoggingConfig(**data["logging"])

    # Environment variable overrides
    if os.environ.get("EVACROUTE_LOG_LEVEL"):
        config.logging.level = os.environ["EVACROUTE_LOG_LEVEL"]
    if os.environ.get("EVACROUTE_EXPORT_PATH"):
        config.export.path = os.environ["EVACROUTE_EXPORT_PATH"]
    if os.environ.get("EVACROUTE_MAX_ATTEMPTS"):
        config.controller.max_attempts = int(os.environ["EVACROUTE_MAX_ATTEMPTS"])
    if os.environ.get("EVACROUTE_BASE_DELAY"):
        config.controller.base_delay = float(os.environ["EVACROUTE_BASE_DELAY"])

    return config


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure logging based on configuration.

    Args:
        config: Logging configuration
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if config.file:
        # Ensure log directory exists
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file))

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logger.info(f"Logging configured at level {config.level}")
