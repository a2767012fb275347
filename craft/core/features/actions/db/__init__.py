# (c) Copyright Datacraft, 2026
from .orm import Action

__all__ = ["Action"]
