# (c) Copyright Datacraft, 2026
from .orm import Resource

__all__ = ["Resource"]
