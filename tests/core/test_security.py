# (c) Copyright Datacraft, 2026
"""Tests for the rate limit client key."""
import pytest
from starlette.requests import Request

from craft.core.middleware import security


def make_request(peer: str, forwarded: str | None = None) -> Request:
	headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
	return Request({"type": "http", "headers": headers, "client": (peer, 52000)})


@pytest.fixture
def trusted(monkeypatch):
	monkeypatch.setattr(security.settings, "trusted_proxies", ["10.0.0.1", "10.0.0.2"])


def test_forwarded_header_ignored_from_direct_clients():
	request = make_request("203.0.113.9", "1.2.3.4")

	assert security.client_key(request) == "203.0.113.9"


def test_forwarded_header_used_behind_trusted_proxy(trusted):
	assert security.client_key(make_request("10.0.0.1", "198.51.100.7, 10.0.0.2")) == "198.51.100.7"
	# a spoofed first hop does not replace the address the proxy saw
	assert security.client_key(make_request("10.0.0.1", "1.2.3.4, 198.51.100.7")) == "198.51.100.7"
	assert security.client_key(make_request("10.0.0.1")) == "10.0.0.1"
	assert security.client_key(make_request("203.0.113.9", "1.2.3.4")) == "203.0.113.9"
