"""Async connection probes that report classified outcomes."""

from __future__ import annotations

import asyncio
import contextlib
import time
from ipaddress import ip_address

import httpx

from netsweep.core.classifier import (
    NetworkOperationError,
    Operation,
    classify,
    from_httpx_error,
)
from netsweep.core.config import ProberSettings
from netsweep.core.exceptions import ProbeError
from netsweep.core.logging import get_logger
from netsweep.core.models import ProbeResult

logger = get_logger(__name__)


def _host_literal(address: str) -> str:
    """Bracket IPv6 literals for use in URLs."""
    if ip_address(address).version == 6:
        return f"[{address}]"
    return address


def _host_header(hostname: str) -> str:
    """IDNA-encode a hostname so it fits in an ASCII Host header."""
    try:
        return hostname.encode("idna").decode("ascii")
    except UnicodeError as e:
        raise ProbeError(f"Hostname {hostname!r} cannot be sent as a Host header: {e}") from e


class ConnectProber:
    """
    Probe one address at a time over TCP or HTTP.

    Socket failures are tagged with the operation that failed (dial, read,
    write) and turned into an Outcome. A ProbeError, such as a hostname that
    cannot be encoded, comes back as UNKNOWN_ERROR, so ``probe`` returns a
    ProbeResult rather than raising.

    Use as an async context manager; http mode keeps one httpx client
    open for the lifetime of the context.
    """

    def __init__(self, settings: ProberSettings | None = None):
        self.settings = settings or ProberSettings()
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ConnectProber":
        if self.settings.mode == "http":
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.settings.read_timeout,
                    connect=self.settings.connect_timeout,
                ),
                verify=self.settings.verify_ssl,
                follow_redirects=False,
                headers={"User-Agent": self.settings.user_agent},
            )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def probe(self, address: str, hostname: str | None = None) -> ProbeResult:
        """Probe ``address`` on the configured port and classify the result."""
        start_time = time.monotonic()
        banner: str | None = None
        http_status: int | None = None
        error: BaseException | None = None

        try:
            if self.settings.mode == "http":
                http_status = await self._probe_http(address, hostname)
            else:
                banner = await self._probe_tcp(address)
        except (NetworkOperationError, ProbeError, httpx.HTTPError) as e:
            error = e

        outcome = classify(error)
        if error is not None:
            logger.debug("probe_failed", address=address, outcome=outcome.value, error=str(error))

        return ProbeResult(
            address=address,
            port=self.settings.port,
            hostname=hostname,
            outcome=outcome,
            error=str(error) if error is not None else None,
            banner=banner,
            http_status=http_status,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )

    async def _probe_tcp(self, address: str) -> str | None:
        target = f"{address}:{self.settings.port}"
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(address, self.settings.port),
                timeout=self.settings.connect_timeout,
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise NetworkOperationError(Operation.DIAL, address=target, cause=e) from e

        try:
            if not self.settings.read_banner:
                return None
            try:
                data = await asyncio.wait_for(
                    reader.read(self.settings.read_banner),
                    timeout=self.settings.read_timeout,
                )
            except (OSError, asyncio.TimeoutError) as e:
                raise NetworkOperationError(Operation.READ, address=target, cause=e) from e
            return data.decode("utf-8", errors="replace")
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()

    async def _probe_http(self, address: str, hostname: str | None) -> int:
        if self._client is None:
            raise ProbeError("http probes need an open ConnectProber context")

        url = f"http://{_host_literal(address)}:{self.settings.port}/"
        headers = {"Host": _host_header(hostname)} if hostname else None
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.TransportError as e:
            raise from_httpx_error(e, address=f"{address}:{self.settings.port}") from e
        return response.status_code
