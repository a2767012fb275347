# (c) Copyright Datacraft, 2026
"""Tests for list helpers and id utilities."""
import re

from craft.core.pagination import PaginationParams, build_meta, like_literal, split_csv
from craft.core.utils import default_name, generate_id, in_use_message, slugify_id


def test_build_meta():
	meta = build_meta(page=2, limit=10, total=35)

	assert meta.total_pages == 4
	assert meta.has_next is True
	assert meta.has_prev is True

	last = build_meta(page=4, limit=10, total=35)
	assert last.has_next is False

	empty = build_meta(page=1, limit=10, total=0)
	assert empty.total_pages == 0
	assert empty.has_next is False
	assert empty.has_prev is False


def test_pagination_params_are_clamped():
	params = PaginationParams(page=0, limit=1000)

	assert params.page == 1
	assert params.limit == 100
	assert params.offset == 0
	assert PaginationParams(page=3, limit=0).limit == 1
	assert PaginationParams(page=3, limit=20).offset == 40


def test_split_csv():
	assert split_csv(None) == []
	assert split_csv("a, b,,c ") == ["a", "b", "c"]
	assert split_csv(["a,b", "c"]) == ["a", "b", "c"]


def test_generated_ids():
	assert re.fullmatch(r"subject-\d{13}-[0-9a-f]{8}", generate_id("subject"))
	assert generate_id("rule") != generate_id("rule")
	assert slugify_id("  Business Hours! ") == "business_hours"
	assert default_name("Alice  Smith") == "alicesmith"


def test_in_use_message():
	assert in_use_message("Alice", "subject", 1) == (
		'Unable to delete "Alice" - This subject is currently being used in 1 policy'
	)
	assert in_use_message("Docs", "resource", 3).endswith("3 policies")


def test_like_literal_escapes_wildcards():
	assert like_literal("a_b") == "a\\_b"
	assert like_literal("100%") == "100\\%"
	assert like_literal('"caf\\u00e9"') == '"caf\\\\u00e9"'
