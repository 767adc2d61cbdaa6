"""Tests for the connection prober."""

import asyncio
import socket

import httpx
import pytest

from netsweep.core.config import ProberSettings
from netsweep.core.exceptions import ProbeError
from netsweep.core.models import Outcome
from netsweep.prober.connect import ConnectProber


def free_port() -> int:
    """Return a local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def start_server(banner: bytes | None):
    """Start a local TCP server that optionally sends a banner."""
    async def handle(reader, writer):
        if banner is not None:
            writer.write(banner)
            await writer.drain()
        await asyncio.sleep(1)
        writer.close()
    
    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    return server, port


class TestTcpProbe:
    """Tests for raw TCP probes."""
    
    @pytest.mark.asyncio
    async def test_successful_connect(self):
        server, port = await start_server(banner=None)
        try:
            async with ConnectProber(ProberSettings(port=port)) as prober:
                result = await prober.probe("127.0.0.1")
        finally:
            server.close()
            await server.wait_closed()
        
        assert result.outcome == Outcome.SUCCESS
        assert result.success is True
        assert result.error is None
        assert result.port == port
    
    @pytest.mark.asyncio
    async def test_banner_is_read(self):
        server, port = await start_server(banner=b"SSH-2.0-OpenSSH_9.6\r\n")
        try:
            settings = ProberSettings(port=port, read_banner=64, read_timeout=2.0)
            async with ConnectProber(settings) as prober:
                result = await prober.probe("127.0.0.1", hostname="ssh.example.com")
        finally:
            server.close()
            await server.wait_closed()
        
        assert result.outcome == Outcome.SUCCESS
        assert result.banner.startswith("SSH-2.0-OpenSSH_9.6")
        assert result.hostname == "ssh.example.com"
    
    @pytest.mark.asyncio
    async def test_refused_connect_is_connection_timeout(self):
        settings = ProberSettings(port=free_port(), connect_timeout=2.0)
        async with ConnectProber(settings) as prober:
            result = await prober.probe("127.0.0.1")
        
        assert result.outcome == Outcome.CONNECTION_TIMEOUT
        assert result.error.startswith("dial 127.0.0.1:")
    
    @pytest.mark.asyncio
    async def test_silent_server_is_io_timeout(self):
        server, port = await start_server(banner=None)
        try:
            settings = ProberSettings(port=port, read_banner=16, read_timeout=0.2)
            async with ConnectProber(settings) as prober:
                result = await prober.probe("127.0.0.1")
        finally:
            server.close()
            await server.wait_closed()
        
        assert result.outcome == Outcome.IO_TIMEOUT
        assert result.error.startswith("read ")


class TestHttpProbe:
    """Tests for HTTP probes."""
    
    @staticmethod
    def prober_with(handler) -> ConnectProber:
        prober = ConnectProber(ProberSettings(mode="http", port=8080))
        prober._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return prober
    
    @pytest.mark.asyncio
    async def test_status_and_host_header(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["host"] = request.headers["host"]
            return httpx.Response(204)
        
        prober = self.prober_with(handler)
        result = await prober.probe("10.0.0.1", hostname="example.com")
        await prober.__aexit__(None, None, None)
        
        assert result.outcome == Outcome.SUCCESS
        assert result.http_status == 204
        assert seen["url"] == "http://10.0.0.1:8080/"
        assert seen["host"] == "example.com"
    
    @pytest.mark.asyncio
    async def test_ipv6_url_is_bracketed(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["host"] = request.url.host
            return httpx.Response(200)
        
        prober = self.prober_with(handler)
        await prober.probe("2001:db8::1")
        await prober.__aexit__(None, None, None)
        
        assert seen["host"] == "2001:db8::1"
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc_type,outcome", [
        (httpx.ConnectError, Outcome.CONNECTION_TIMEOUT),
        (httpx.ReadTimeout, Outcome.IO_TIMEOUT),
        (httpx.WriteError, Outcome.IO_TIMEOUT),
        (httpx.RemoteProtocolError, Outcome.UNKNOWN_ERROR),
    ])
    async def test_transport_failures(self, exc_type, outcome):
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("failed", request=request)
        
        prober = self.prober_with(handler)
        result = await prober.probe("10.0.0.1")
        await prober.__aexit__(None, None, None)
        
        assert result.outcome == outcome
        assert result.http_status is None
        assert result.error is not None
    
    @pytest.mark.asyncio
    async def test_non_ascii_host_header_is_idna_encoded(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["host"] = request.headers["host"]
            return httpx.Response(200)
        
        prober = self.prober_with(handler)
        result = await prober.probe("127.0.0.1", hostname="exämple.com")
        await prober.__aexit__(None, None, None)
        
        assert result.outcome == Outcome.SUCCESS
        assert seen["host"] == "xn--exmple-cua.com"
        assert result.hostname == "exämple.com"
    
    @pytest.mark.asyncio
    async def test_unencodable_hostname_is_unknown_error(self):
        prober = self.prober_with(lambda request: httpx.Response(200))
        result = await prober.probe("127.0.0.1", hostname="a" * 64 + ".example.com")
        await prober.__aexit__(None, None, None)
        
        assert result.outcome == Outcome.UNKNOWN_ERROR
        assert "cannot be sent as a Host header" in result.error
    
    @pytest.mark.asyncio
    async def test_http_needs_open_context(self):
        prober = ConnectProber(ProberSettings(mode="http"))
        with pytest.raises(ProbeError):
            await prober._probe_http("10.0.0.1", None)
        
        result = await prober.probe("10.0.0.1")
        assert result.outcome == Outcome.UNKNOWN_ERROR
        assert "open ConnectProber context" in result.error
    
    @pytest.mark.asyncio
    async def test_context_opens_and_closes_client(self):
        prober = ConnectProber(ProberSettings(mode="http"))
        async with prober:
            assert isinstance(prober._client, httpx.AsyncClient)
        assert prober._client is None
