"""
Imperative shell: configuration and message delivery
"""

from .bus import Delivery, MessageBus, build_bus
from .config import ConfigError, DeploymentConfig, load_config, parse_config

__all__ = [
    "Delivery",
    "MessageBus",
    "build_bus",
    "ConfigError",
    "DeploymentConfig",
    "load_config",
    "parse_config",
]
