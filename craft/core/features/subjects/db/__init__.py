# (c) Copyright Datacraft, 2026
from .orm import Subject

__all__ = ["Subject"]
