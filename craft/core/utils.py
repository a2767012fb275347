# (c) Copyright Datacraft, 2026
"""Small shared helpers."""
import re
import secrets
import time


def generate_id(prefix: str) -> str:
	"""Readable unique id such as ``subject-1718000000000-9f2c4e1a``."""
	return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def slugify_id(name: str) -> str:
	"""``"Business Hours"`` -> ``"business_hours"``."""
	slug = re.sub(r"\s+", "_", name.strip().lower())
	return re.sub(r"[^a-z0-9_-]", "", slug)


def default_name(display_name: str) -> str:
	return re.sub(r"\s+", "", display_name).lower()


def plural(count: int, singular: str, plural_form: str | None = None) -> str:
	return singular if count == 1 else (plural_form or f"{singular}s")


def in_use_message(display_name: str, kind: str, count: int) -> str:
	return (
		f'Unable to delete "{display_name}" - This {kind} is currently being used in '
		f"{count} {plural(count, 'policy', 'policies')}"
	)
