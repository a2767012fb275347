# (c) Copyright Datacraft, 2026
from .orm import Attribute

__all__ = ["Attribute"]
