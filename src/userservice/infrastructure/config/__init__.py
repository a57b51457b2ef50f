"""Configuration loading and models."""

from .config_loader import ConfigLoader
from .config_models import UserServiceConfig

__all__ = ["ConfigLoader", "UserServiceConfig"]
