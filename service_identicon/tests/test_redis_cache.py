"""
Unit tests for the Redis image cache.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, patch

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError

from shared.errors import CacheReadError, CacheWriteError
from service_identicon.app.cache import ImageCache, create_pool


class TestCreatePool:
    """Test cases for create_pool()."""

    def test_pool_is_bounded_and_blocking(self):
        """Test the pool caps connections and waits for a free one."""
        pool = create_pool("redis://localhost:6379/0", max_connections=4, timeout=2.0)

        assert isinstance(pool, redis.BlockingConnectionPool)
        assert pool.max_connections == 4
        assert pool.timeout == 2.0

    def test_commands_are_attempted_once(self):
        """Test pooled connections never retry a failed command."""
        pool = create_pool("redis://localhost:6379/0")

        assert pool.connection_kwargs["retry"]._retries == 0


class TestImageCache:
    """Test cases for ImageCache."""

    @pytest.fixture
    def image_cache(self):
        """Create ImageCache instance over an unconnected pool."""
        return ImageCache(create_pool("redis://localhost:6379/0"))

    @pytest.mark.asyncio
    async def test_get_hit(self, image_cache):
        """Test reading stored bytes."""
        with patch.object(image_cache.redis, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.return_value = b"\x89PNG"

            result = await image_cache.get("abc123")

            assert result == b"\x89PNG"
            mock_get.assert_called_once_with("abc123")

    @pytest.mark.asyncio
    async def test_get_miss(self, image_cache):
        """Test reading an absent key."""
        with patch.object(image_cache.redis, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.return_value = None

            assert await image_cache.get("abc123") is None

    @pytest.mark.asyncio
    async def test_get_connection_error(self, image_cache):
        """Test unreachable Redis raises CacheReadError."""
        with patch.object(image_cache.redis, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = RedisConnectionError("Connection refused")

            with pytest.raises(CacheReadError) as exc_info:
                await image_cache.get("abc123")

            assert exc_info.value.code == "CACHE_READ_ERROR"
            assert exc_info.value.details == {"key": "abc123"}

    @pytest.mark.asyncio
    async def test_get_wrong_type(self, image_cache):
        """Test a key holding a non-string value raises CacheReadError."""
        with patch.object(image_cache.redis, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")

            with pytest.raises(CacheReadError):
                await image_cache.get("abc123")

    @pytest.mark.asyncio
    async def test_get_unexpected_value(self, image_cache):
        """Test a decoded string response is treated as malformed."""
        with patch.object(image_cache.redis, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.return_value = "not-bytes"

            with pytest.raises(CacheReadError):
                await image_cache.get("abc123")

    @pytest.mark.asyncio
    async def test_set_success(self, image_cache):
        """Test storing bytes without expiry."""
        with patch.object(image_cache.redis, 'set', new_callable=AsyncMock) as mock_set:
            mock_set.return_value = True

            await image_cache.set("abc123", b"\x89PNG")

            mock_set.assert_called_once_with("abc123", b"\x89PNG")

    @pytest.mark.asyncio
    async def test_set_connection_error(self, image_cache):
        """Test unreachable Redis raises CacheWriteError."""
        with patch.object(image_cache.redis, 'set', new_callable=AsyncMock) as mock_set:
            mock_set.side_effect = RedisConnectionError("Connection refused")

            with pytest.raises(CacheWriteError) as exc_info:
                await image_cache.set("abc123", b"\x89PNG")

            assert exc_info.value.code == "CACHE_WRITE_ERROR"

    @pytest.mark.asyncio
    async def test_set_rejected(self, image_cache):
        """Test a falsy SET reply raises CacheWriteError."""
        with patch.object(image_cache.redis, 'set', new_callable=AsyncMock) as mock_set:
            mock_set.return_value = None

            with pytest.raises(CacheWriteError):
                await image_cache.set("abc123", b"\x89PNG")

    @pytest.mark.asyncio
    async def test_health_check(self, image_cache):
        """Test health check reflects PING."""
        with patch.object(image_cache.redis, 'ping', new_callable=AsyncMock) as mock_ping:
            mock_ping.return_value = True
            assert await image_cache.health_check() is True

            mock_ping.side_effect = RedisConnectionError("Connection refused")
            assert await image_cache.health_check() is False

    @pytest.mark.asyncio
    async def test_close_disconnects_pool(self, image_cache):
        """Test closing releases the pool's connections."""
        with patch.object(image_cache.redis, 'aclose', new_callable=AsyncMock) as mock_close, \
                patch.object(image_cache.pool, 'disconnect', new_callable=AsyncMock) as mock_disconnect:
            await image_cache.close()

            mock_close.assert_called_once()
            mock_disconnect.assert_called_once()


class TestPoolRelease:
    """Test cases for connection release against real sockets."""

    @pytest.mark.asyncio
    async def test_failed_commands_return_connections(self):
        """Test repeated failures on a one-connection pool never exhaust it."""
        pool = create_pool("redis://127.0.0.1:1/0", max_connections=1, timeout=0.5, socket_timeout=1.0)
        image_cache = ImageCache(pool)

        try:
            for _ in range(5):
                with pytest.raises(CacheReadError) as read_error:
                    await image_cache.get("abc123")
                assert "No connection available" not in read_error.value.message

                with pytest.raises(CacheWriteError) as write_error:
                    await image_cache.set("abc123", b"\x89PNG")
                assert "No connection available" not in write_error.value.message

            assert len(pool._in_use_connections) == 0
        finally:
            await pool.disconnect()

    @pytest.mark.asyncio
    async def test_cancelled_command_returns_connection(self):
        """Test a caller cancelled mid-command leaves the pool empty of checked-out connections."""

        async def silent(reader, writer):
            try:
                await reader.read()
            finally:
                writer.close()

        server = await asyncio.start_server(silent, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        pool = create_pool(f"redis://127.0.0.1:{port}/0", max_connections=1, timeout=0.5, socket_timeout=5.0)
        image_cache = ImageCache(pool)

        try:
            pending = asyncio.ensure_future(image_cache.get("abc123"))
            await asyncio.sleep(0.1)
            assert not pending.done()

            pending.cancel()
            with pytest.raises(asyncio.CancelledError):
                await pending

            assert len(pool._in_use_connections) == 0
        finally:
            await pool.disconnect()
            server.close()
            await server.wait_closed()
