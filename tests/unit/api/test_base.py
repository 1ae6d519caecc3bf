"""Unit tests for paperpile_navigate.api.base (parse_retry_after, BaseAPIClient)."""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from paperpile_navigate.api.base import BaseAPIClient, parse_retry_after
from paperpile_navigate.utils.errors import APIError, RateLimitError


def _run(coro):
    """Run async test without requiring pytest-asyncio."""
    return asyncio.run(coro)


# Concrete client for testing BaseAPIClient
class ConcreteAPIClient(BaseAPIClient):
    async def get_paper(self, paper_id: str):
        return await self._retry_on_rate_limit(
            lambda: self._make_request("GET", f"paper/{paper_id}")
        )


def _with_transport(client, handler):
    client.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


class TestParseRetryAfter:
    def test_numeric_seconds(self):
        assert parse_retry_after("1", 2.0) == 1.0
        assert parse_retry_after(" 3.5 ", 2.0) == 3.5

    def test_missing_header_uses_default(self):
        assert parse_retry_after(None, 2.0) == 2.0

    def test_non_numeric_uses_default(self):
        # HTTP-date form is not supported
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", 2.0) == 2.0

    def test_negative_uses_default(self):
        assert parse_retry_after("-5", 2.0) == 2.0


class TestBaseAPIClient:
    @pytest.fixture
    def client(self):
        return ConcreteAPIClient(
            base_url="https://api.example.com/v1/",
            timeout=10,
            max_retries=3,
            default_retry_after=2.0,
        )

    def test_init_strips_trailing_slash(self, client):
        assert client.base_url == "https://api.example.com/v1"
        assert client.timeout == 10
        assert client.max_retries == 3

    def test_make_request_success(self, client):
        async def _():
            client.client = AsyncMock()
            response = MagicMock()
            response.status_code = 200
            response.json.return_value = {"paperId": "abc", "title": "Test"}
            response.raise_for_status = MagicMock()
            client.client.request = AsyncMock(return_value=response)
            result = await client._make_request("GET", "paper/abc")
            assert result == {"paperId": "abc", "title": "Test"}
            client.client.request.assert_called_once()
            call_kw = client.client.request.call_args[1]
            assert call_kw["method"] == "GET"
            assert call_kw["url"] == "https://api.example.com/v1/paper/abc"

        _run(_())

    def test_empty_endpoint_targets_base_url(self, client):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="<feed/>")

        async def _():
            _with_transport(client, handler)
            body = await client._make_text_request("GET", "", params={"id_list": "2301.00001"})
            assert body == "<feed/>"

        _run(_())
        assert seen == ["https://api.example.com/v1?id_list=2301.00001"]

    def test_make_request_429_raises_rate_limit_error_with_retry_after(self, client):
        async def _():
            _with_transport(
                client, lambda request: httpx.Response(429, headers={"Retry-After": "7"})
            )
            with pytest.raises(RateLimitError, match="Rate limit exceeded") as exc_info:
                await client._make_request("GET", "paper/abc")
            assert exc_info.value.retry_after == 7.0

        _run(_())

    def test_make_request_429_without_header_uses_default_wait(self, client):
        async def _():
            _with_transport(client, lambda request: httpx.Response(429))
            with pytest.raises(RateLimitError) as exc_info:
                await client._make_request("GET", "paper/abc")
            assert exc_info.value.retry_after == 2.0

        _run(_())

    def test_make_request_http_error_raises_api_error(self, client):
        async def _():
            _with_transport(client, lambda request: httpx.Response(404))
            with pytest.raises(APIError, match="HTTP 404"):
                await client._make_request("GET", "paper/xyz")

        _run(_())

    def test_make_request_transport_error_raises_api_error(self, client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async def _():
            _with_transport(client, handler)
            with pytest.raises(APIError, match="Request failed"):
                await client._make_request("GET", "paper/xyz")

        _run(_())

    def test_make_request_invalid_json_raises_api_error(self, client):
        async def _():
            _with_transport(client, lambda request: httpx.Response(200, text="not json"))
            with pytest.raises(APIError, match="Invalid JSON"):
                await client._make_request("GET", "paper/xyz")

        _run(_())

    def test_two_rate_limits_then_success_sleeps_exactly_twice(self, client):
        responses = [
            httpx.Response(429, headers={"Retry-After": "1"}),
            httpx.Response(429, headers={"Retry-After": "1"}),
            httpx.Response(200, json={"paperId": "abc"}),
        ]
        calls = []

        def handler(request):
            calls.append(request)
            return responses[len(calls) - 1]

        async def _():
            _with_transport(client, handler)
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                result = await client.get_paper("abc")
            assert result == {"paperId": "abc"}
            assert mock_sleep.await_count == 2
            assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 1.0]

        _run(_())
        assert len(calls) == 3

    def test_retry_on_rate_limit_succeeds_first_try(self, client):
        async def _():
            func = AsyncMock(return_value="ok")
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                result = await client._retry_on_rate_limit(func)
            assert result == "ok"
            func.assert_called_once()
            mock_sleep.assert_not_called()

        _run(_())

    def test_retry_on_rate_limit_gives_up_at_ceiling(self, client):
        async def _():
            func = AsyncMock(side_effect=RateLimitError("rate limited", retry_after=1))
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                with pytest.raises(RateLimitError, match="rate limited"):
                    await client._retry_on_rate_limit(func, max_retries=3)
            # one initial attempt plus three retries
            assert func.call_count == 4
            assert mock_sleep.await_count == 3

        _run(_())

    def test_retry_on_rate_limit_zero_retries_raises_immediately(self, client):
        async def _():
            func = AsyncMock(side_effect=RateLimitError("rate limited", retry_after=1))
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                with pytest.raises(RateLimitError):
                    await client._retry_on_rate_limit(func, max_retries=0)
            func.assert_called_once()
            mock_sleep.assert_not_called()

        _run(_())

    def test_retry_on_rate_limit_does_not_retry_other_errors(self, client):
        async def _():
            func = AsyncMock(side_effect=APIError("HTTP 500: boom"))
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                with pytest.raises(APIError, match="HTTP 500"):
                    await client._retry_on_rate_limit(func)
            func.assert_called_once()
            mock_sleep.assert_not_called()

        _run(_())

    def test_close(self, client):
        async def _():
            client.client = AsyncMock()
            await client.close()
            client.client.aclose.assert_called_once()

        _run(_())
