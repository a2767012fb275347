# (c) Copyright Datacraft, 2026
from .api import PolicyDB
from .orm import PolicyModel

__all__ = ["PolicyDB", "PolicyModel"]
