# (c) Copyright Datacraft, 2026
"""Discovery of feature routers."""
import importlib
import logging
from pathlib import Path

from fastapi import APIRouter

logger = logging.getLogger(__name__)


def discover_routers(core_path: Path, package: str = "craft.core") -> list[tuple[APIRouter, str]]:
	"""
	Import ``<package>.features.<name>.router`` for every feature folder
	under ``core_path`` that has a ``router.py`` exposing ``router``.
	"""
	found = []
	features_dir = core_path / "features"
	for router_file in sorted(features_dir.glob("*/router.py")):
		feature_name = router_file.parent.name
		module = importlib.import_module(f"{package}.features.{feature_name}.router")
		router = getattr(module, "router", None)
		if not isinstance(router, APIRouter):
			logger.warning(f"Feature {feature_name} has router.py without an APIRouter")
			continue
		found.append((router, feature_name))
		logger.debug(f"Discovered router for feature {feature_name}")
	return found
