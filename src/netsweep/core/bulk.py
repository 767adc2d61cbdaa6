"""Bulk scanning orchestrator.

Resolves, expands and probes a list of targets with concurrency control.
A target that fails to resolve is recorded and skipped; it never stops
the rest of the run.
"""

from __future__ import annotations

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List

from rich.progress import Progress, TaskID

from netsweep.core.config import Settings
from netsweep.core.enumerator import AddressRange, format_address
from netsweep.core.classifier import classify
from netsweep.core.exceptions import LookupFailedError, TargetError
from netsweep.core.logging import get_logger, log_target_event
from netsweep.core.models import Outcome, ProbeResult, TargetSpec
from netsweep.core.resolver import TargetResolver
from netsweep.prober.connect import ConnectProber

logger = get_logger(__name__)


def load_targets(path: Path) -> List[str]:
    """Read one target per line, skipping blank lines and # comments."""
    return [
        line.strip()
        for line in path.read_text().splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]


@dataclass
class TargetResult:
    """Summary result for a single target in a bulk scan."""

    target: str
    status: str  # "resolved", "failed"
    spec: TargetSpec | None = None
    error: str | None = None
    probes: List[ProbeResult] = field(default_factory=list)
    duration_seconds: float = 0.0


class BulkScanOrchestrator:
    """Orchestrates resolving and probing of multiple targets."""

    def __init__(
        self,
        settings: Settings,
        targets: List[str],
        resolver: TargetResolver | None = None,
    ):
        self.settings = settings
        self.targets = targets
        self.resolver = resolver or TargetResolver(settings.resolver)
        self.results: List[TargetResult] = []
        self._sem = asyncio.Semaphore(settings.prober.concurrency)
        self._lookup_slots = asyncio.Semaphore(settings.resolver.lookup_concurrency)
        self._lookup_pool: ThreadPoolExecutor | None = None

    async def run(self, progress: Progress | None = None) -> List[TargetResult]:
        """Run the bulk scan."""
        overall_task = None
        if progress is not None:
            overall_task = progress.add_task(
                f"[green]Scanning {len(self.targets)} targets...",
                total=len(self.targets),
            )

        try:
            async with ConnectProber(self.settings.prober) as prober:
                tasks = [
                    self._scan_target(target, prober, progress, overall_task)
                    for target in self.targets
                ]
                # _scan_target records its own failures, so gather never sees one
                self.results = await asyncio.gather(*tasks)
        finally:
            if self._lookup_pool is not None:
                # Lookups that outlived their timeout finish in the background
                self._lookup_pool.shutdown(wait=False)
                self._lookup_pool = None

        return self.results

    async def resolve(self, target: str) -> TargetSpec:
        """Resolve a target off the event loop, bounded by the lookup timeout."""
        return await self._lookup(self.resolver.resolve, target)

    async def _lookup(
        self,
        func: Callable[[str], TargetSpec],
        text: str,
    ) -> TargetSpec:
        # The timer starts once a worker thread is free, and the slot is
        # held until that thread returns, even after a timeout.
        await self._lookup_slots.acquire()
        future = asyncio.get_running_loop().run_in_executor(self._pool(), func, text)
        future.add_done_callback(lambda _: self._lookup_slots.release())
        try:
            return await asyncio.wait_for(
                asyncio.shield(future),
                timeout=self.settings.resolver.lookup_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LookupFailedError(
                f"Lookup of {text!r} timed out after "
                f"{self.settings.resolver.lookup_timeout}s",
                target=text,
            ) from e

    def _pool(self) -> ThreadPoolExecutor:
        if self._lookup_pool is None:
            self._lookup_pool = ThreadPoolExecutor(
                max_workers=self.settings.resolver.lookup_concurrency,
                thread_name_prefix="netsweep-lookup",
            )
        return self._lookup_pool

    async def addresses_for(self, spec: TargetSpec) -> List[str]:
        """Expand a spec into text addresses, resolving hostname-only specs."""
        prefix = spec.prefix
        if prefix is None:
            # Hostname-only pair: the address is ours to look up
            prefix = (await self._lookup(self.resolver.lookup, spec.hostname)).prefix

        if prefix.size > self.settings.resolver.max_addresses:
            raise TargetError(
                f"{prefix} covers {prefix.size} addresses, "
                f"limit is {self.settings.resolver.max_addresses}",
                target=spec.raw,
            )
        return [format_address(addr) for addr in AddressRange(prefix)]

    async def _scan_target(
        self,
        target: str,
        prober: ConnectProber,
        progress: Progress | None,
        overall_task: TaskID | None,
    ) -> TargetResult:
        start_time = time.monotonic()

        try:
            spec = await self.resolve(target)
            addresses = await self.addresses_for(spec)
        except TargetError as e:
            logger.warning("target_failed", target=target, error=str(e))
            self._advance(progress, overall_task)
            return TargetResult(
                target=target,
                status="failed",
                error=str(e),
                duration_seconds=time.monotonic() - start_time,
            )

        log_target_event("target_resolved", target, addresses=len(addresses))
        probes = await asyncio.gather(*[
            self._probe(prober, address, spec.hostname)
            for address in addresses
        ])

        self._advance(progress, overall_task)
        return TargetResult(
            target=target,
            status="resolved",
            spec=spec,
            probes=list(probes),
            duration_seconds=time.monotonic() - start_time,
        )

    async def _probe(
        self,
        prober: ConnectProber,
        address: str,
        hostname: str | None,
    ) -> ProbeResult:
        async with self._sem:
            try:
                return await prober.probe(address, hostname)
            except Exception as e:
                # Recorded on this target only; the rest of the run goes on
                logger.warning("probe_crashed", address=address, hostname=hostname, error=repr(e))
                return ProbeResult(
                    address=address,
                    port=self.settings.prober.port,
                    hostname=hostname,
                    outcome=classify(e),
                    error=f"{type(e).__name__}: {e}",
                )

    @staticmethod
    def _advance(progress: Progress | None, task: TaskID | None) -> None:
        if progress is not None and task is not None:
            progress.advance(task)

    def generate_master_report(self) -> dict[str, Any]:
        """Generate aggregated report for all targets."""
        outcome_counts = {outcome.value: 0 for outcome in Outcome}
        for result in self.results:
            for probe in result.probes:
                outcome_counts[Outcome(probe.outcome).value] += 1

        return {
            "summary": {
                "total_targets": len(self.targets),
                "resolved": len([r for r in self.results if r.status == "resolved"]),
                "failed": len([r for r in self.results if r.status == "failed"]),
                "total_probes": sum(len(r.probes) for r in self.results),
                "outcomes": outcome_counts,
                "port": self.settings.prober.port,
                "mode": self.settings.prober.mode,
                "scan_date": datetime.now(timezone.utc).isoformat(),
            },
            "targets": [
                {
                    "target": r.target,
                    "status": r.status,
                    "resolved": r.spec.describe() if r.spec else None,
                    "error": r.error,
                    "duration": r.duration_seconds,
                    "probes": [p.model_dump(mode="json") for p in r.probes],
                }
                for r in self.results
            ],
        }
