"""Configuration package for the interview preparation service."""
from .routes import AppConfig, LlmRoute, load_config, load_route, resolve_route
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "load_route",
    "resolve_route",
    "Settings",
    "settings",
]
