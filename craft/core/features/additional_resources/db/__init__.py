# (c) Copyright Datacraft, 2026
from .orm import AdditionalResource

__all__ = ["AdditionalResource"]
