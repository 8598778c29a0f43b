"""Tests for connectivity probes."""
import httpx
import pytest

from kapture.sync.connectivity import HttpConnectivityProbe, StaticConnectivityProbe


def probe_with(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpConnectivityProbe("https://api.notion.com", http_client=http)


class TestHttpConnectivityProbe:
    @pytest.mark.asyncio
    async def test_any_response_is_reachable(self):
        probe = probe_with(lambda request: httpx.Response(200))
        assert await probe.is_reachable() is True

    @pytest.mark.asyncio
    async def test_error_status_still_reachable(self):
        probe = probe_with(lambda request: httpx.Response(503))
        assert await probe.is_reachable() is True

    @pytest.mark.asyncio
    async def test_uses_head(self):
        methods = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(200)

        await probe_with(handler).is_reachable()
        assert methods == ["HEAD"]

    @pytest.mark.asyncio
    async def test_connect_error_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        assert await probe_with(handler).is_reachable() is False

    @pytest.mark.asyncio
    async def test_timeout_is_unreachable(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert await probe_with(handler).is_reachable() is False


class TestStaticConnectivityProbe:
    @pytest.mark.asyncio
    async def test_toggle(self):
        probe = StaticConnectivityProbe()
        assert await probe.is_reachable() is True
        probe.reachable = False
        assert await probe.is_reachable() is False
