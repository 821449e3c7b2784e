"""
Shared fixtures for Identicon Service tests.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from shared.config import get_config
from shared.errors import CacheReadError, CacheWriteError, UpstreamError
from shared.logging import identifier_var, request_id_var
from service_identicon.app.identity import IdentityDeriver

TEST_SALT = "UNIQUE_SAL"


class FakeCache:
    """In-memory image cache recording every read and write."""

    def __init__(self, entries: Optional[Dict[str, bytes]] = None, fail_reads: bool = False, fail_writes: bool = False):
        self.entries = dict(entries or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.reads: List[str] = []
        self.writes: List[Tuple[str, bytes]] = []

    async def get(self, identifier: str) -> Optional[bytes]:
        self.reads.append(identifier)
        if self.fail_reads:
            raise CacheReadError("connection refused")
        return self.entries.get(identifier)

    async def set(self, identifier: str, image: bytes) -> None:
        self.writes.append((identifier, image))
        if self.fail_writes:
            raise CacheWriteError("READONLY You can't write against a read only replica")
        self.entries[identifier] = image

    async def health_check(self) -> bool:
        return not self.fail_reads


class FakeGenerator:
    """Generation backend stub returning fixed bytes, optionally gated or failing."""

    def __init__(self, image: bytes = b"\x89PNG-monster", fail: bool = False, gate: Optional[asyncio.Event] = None):
        self.image = image
        self.fail = fail
        self.gate = gate
        self.calls: List[str] = []
        self.contexts: List[Tuple[Optional[str], Optional[str]]] = []

    async def fetch(self, identifier: str) -> bytes:
        self.calls.append(identifier)
        self.contexts.append((request_id_var.get(), identifier_var.get()))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise UpstreamError("Unexpected status 500", details={"status_code": 500})
        return self.image


@pytest.fixture
def deriver():
    """Deriver bound to the default salt."""
    return IdentityDeriver(TEST_SALT)


@pytest.fixture
def fake_cache():
    """Empty in-memory cache."""
    return FakeCache()


@pytest.fixture
def fake_generator():
    """Backend stub that always succeeds."""
    return FakeGenerator()


@pytest.fixture
def service_config():
    """Service configuration pinned for tests."""
    return get_config("identicon", 9090, identity_salt=TEST_SALT, env="test", single_flight=True)
