# (c) Copyright Datacraft, 2026
"""Hierarchy database models."""

from .orm import Application, Environment, Workspace

__all__ = [
	"Application",
	"Environment",
	"Workspace",
]
