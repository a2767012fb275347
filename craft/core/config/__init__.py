# (c) Copyright Datacraft, 2026
"""Configuration module for craft."""
from .settings import RuntimeEnvironment, Settings, get_settings

__all__ = [
	'RuntimeEnvironment',
	'Settings',
	'get_settings',
]
