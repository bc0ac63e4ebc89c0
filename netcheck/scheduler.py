"""
Two-phase probe scheduler
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from .aggregator import ResultAggregator
from .config import RunConfig
from .diagnostics import (
    SLOW_LOOKUP_THRESHOLD,
    SLOW_SECURE_CHANNEL_THRESHOLD,
    SLOW_TOTAL_THRESHOLD,
    Diagnostics,
)
from .errors import ProbeError, ProbeTimeoutError
from .models import (
    ALL_STEPS,
    DiagnosticReport,
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    Step,
    StepStatus,
    TransportOutcome,
)
from .probe.base import Prober
from .progress import NullSink, ProgressSink
from .report import assemble_report, parse_target


logger = logging.getLogger(__name__)

T = TypeVar('T')

# Path progress only; analysis uses its own ratio
SILENT_PATH_RATIO = 0.5


class PhaseScheduler:
    """
    Runs one diagnostic against a target.
    
    Phase 1 resolves the host name. Phase 2 starts connection timing,
    path tracing and stability sampling together and waits for all
    three. Every probe gets one attempt under its own timeout; failures
    and timeouts leave that outcome absent and are reported through the
    progress sink only.
    """
    
    def __init__(
        self,
        prober: Prober,
        sink: Optional[ProgressSink] = None,
        config: RunConfig = RunConfig(),
        diagnostics: Optional[Diagnostics] = None
    ):
        self.prober = prober
        self.sink = sink or NullSink()
        self.config = config
        self.diagnostics = diagnostics or Diagnostics()
    
    def _emit(self, step: str, status: StepStatus, message: str):
        """Deliver a progress event; sink errors never reach the run"""
        try:
            self.sink.notify(step, status, message)
        except Exception:
            logger.debug("Progress sink failed for %s", step, exc_info=True)
    
    async def _bounded(self, name: str, probe: Awaitable[T], timeout: float) -> T:
        """
        Await probe with a timeout.
        
        Errors raised by the probe itself, TimeoutError included, come
        out as ProbeError so they are never mistaken for the wait expiring.
        
        Raises:
            ProbeTimeoutError: if the timeout elapses first
            ProbeError: if the probe raised
        """
        try:
            return await asyncio.wait_for(_reraise_as_probe_error(probe), timeout=timeout)
        except asyncio.TimeoutError:
            raise ProbeTimeoutError(name, timeout) from None
    
    async def run(self, target: str) -> DiagnosticReport:
        """
        Execute both phases and build the report.
        
        Args:
            target: Host name or URL
        
        Returns:
            DiagnosticReport
        
        Raises:
            InvalidTargetError: if no host name can be extracted; raised
                before any probing or progress
        """
        parsed = parse_target(target)
        aggregator = ResultAggregator()
        
        for step in ALL_STEPS:
            self._emit(step, StepStatus.PENDING, "Waiting")
        
        # Phase 1
        resolution = await self._run_resolution(parsed.hostname)
        aggregator.record_resolution(resolution)
        target_address = resolution.first_address if resolution else ''
        
        # Phase 2
        self._emit(Step.TRANSPORT, StepStatus.RUNNING, "Timing connection...")
        self._emit(Step.PATH, StepStatus.RUNNING, "Tracing path...")
        self._emit(Step.STABILITY, StepStatus.RUNNING, "Sampling stability...")
        
        transport, path, stability = await asyncio.gather(
            self._run_transport(parsed.url),
            self._run_path(parsed.hostname, target_address),
            self._run_stability(parsed.hostname),
        )
        aggregator.record_transport(transport)
        aggregator.record_path(path)
        aggregator.record_stability(stability)
        aggregator.seal()
        
        snapshot = aggregator.snapshot()
        analysis = self.diagnostics.evaluate(snapshot)
        
        logger.info(
            "Diagnostic for %s finished: score=%d status=%s issues=%d",
            parsed.url, analysis.score, analysis.status.value, len(analysis.issues),
        )
        
        return assemble_report(parsed, snapshot, analysis)
    
    def run_sync(self, target: str) -> DiagnosticReport:
        """Blocking wrapper around run()"""
        return asyncio.run(self.run(target))
    
    async def _run_resolution(self, hostname: str) -> Optional[ResolutionOutcome]:
        self._emit(Step.RESOLUTION, StepStatus.RUNNING, f"Resolving {hostname}...")
        
        try:
            result = await self._bounded(
                Step.RESOLUTION,
                self.prober.resolve(hostname),
                self.config.resolution_timeout,
            )
        except ProbeTimeoutError as e:
            logger.warning("Resolution of %s timed out", hostname)
            self._emit(Step.RESOLUTION, StepStatus.ERROR, _timeout_message(e))
            return None
        except Exception as e:
            logger.warning("Resolution of %s failed: %s", hostname, e)
            self._emit(Step.RESOLUTION, StepStatus.ERROR, f"Error: {e}")
            return None
        
        if not result.resolved:
            status = StepStatus.ERROR
        elif result.lookup_ms > SLOW_LOOKUP_THRESHOLD:
            status = StepStatus.WARNING
        else:
            status = StepStatus.SUCCESS
        
        self._emit(
            Step.RESOLUTION, status,
            f"Found {len(result.addresses)} address(es), lookup {result.lookup_ms:.0f}ms"
        )
        return result
    
    async def _run_transport(self, url: str) -> Optional[TransportOutcome]:
        try:
            result = await self._bounded(
                Step.TRANSPORT,
                self.prober.time_connection(url),
                self.config.probe_timeout,
            )
        except ProbeTimeoutError as e:
            logger.warning("Connection timing for %s timed out", url)
            message = _timeout_message(e)
            for step in (Step.TRANSPORT, Step.SECURE_CHANNEL, Step.HTTP):
                self._emit(step, StepStatus.ERROR, message)
            return None
        except Exception as e:
            logger.warning("Connection timing for %s failed: %s", url, e)
            self._emit(Step.TRANSPORT, StepStatus.ERROR, f"Error: {e}")
            self._emit(Step.SECURE_CHANNEL, StepStatus.ERROR, "Secure channel not checked")
            self._emit(Step.HTTP, StepStatus.ERROR, "HTTP not checked")
            return None
        
        self._report_transport(result)
        return result
    
    def _report_transport(self, result: TransportOutcome):
        """Derive secure-channel, http and transport progress from one measurement"""
        secure_only = result.secure_channel_only_ms
        if not result.responded and result.secure_channel_ms == 0:
            self._emit(Step.SECURE_CHANNEL, StepStatus.ERROR, "No secure channel established")
        elif not result.timings_monotonic:
            self._emit(Step.SECURE_CHANNEL, StepStatus.WARNING, "Secure channel timing out of order")
        elif secure_only > SLOW_SECURE_CHANNEL_THRESHOLD:
            self._emit(Step.SECURE_CHANNEL, StepStatus.WARNING, f"TLS handshake: {secure_only:.0f}ms")
        else:
            self._emit(Step.SECURE_CHANNEL, StepStatus.SUCCESS, f"TLS handshake: {secure_only:.0f}ms")
        
        code = result.response_code
        if 200 <= code < 400:
            http_status = StepStatus.SUCCESS
        elif code >= 400:
            http_status = StepStatus.WARNING
        else:
            http_status = StepStatus.ERROR
        self._emit(Step.HTTP, http_status, f"HTTP {code}, total time: {result.total_ms:.0f}ms")
        
        if not result.responded:
            transport_status = StepStatus.ERROR
        elif result.total_ms > SLOW_TOTAL_THRESHOLD:
            transport_status = StepStatus.WARNING
        else:
            transport_status = StepStatus.SUCCESS
        self._emit(
            Step.TRANSPORT, transport_status,
            f"Connect: {result.connect_ms:.0f}ms, TTFB: {result.first_byte_ms:.0f}ms"
        )
    
    async def _run_path(self, hostname: str, target_address: str) -> Optional[PathTraceOutcome]:
        try:
            result = await self._bounded(
                Step.PATH,
                self.prober.trace_path(hostname, target_address),
                self.config.probe_timeout,
            )
        except ProbeTimeoutError as e:
            logger.warning("Path trace to %s timed out", hostname)
            self._emit(Step.PATH, StepStatus.WARNING, _timeout_message(e))
            return None
        except Exception as e:
            logger.warning("Path trace to %s failed: %s", hostname, e)
            self._emit(Step.PATH, StepStatus.WARNING, f"Error: {e}")
            return None
        
        silent = result.unresponsive_hops / max(1, len(result.hops))
        status = StepStatus.WARNING if silent > SILENT_PATH_RATIO else StepStatus.SUCCESS
        self._emit(Step.PATH, status, f"{result.total_hops} hops, {result.elapsed_ms:.0f}ms")
        return result
    
    async def _run_stability(self, hostname: str) -> Optional[StabilityOutcome]:
        try:
            result = await self._bounded(
                Step.STABILITY,
                self.prober.sample_stability(hostname, self.config.stability_samples),
                self.config.probe_timeout,
            )
        except ProbeTimeoutError as e:
            logger.warning("Stability sampling of %s timed out", hostname)
            self._emit(Step.STABILITY, StepStatus.WARNING, _timeout_message(e))
            return None
        except Exception as e:
            logger.warning("Stability sampling of %s failed: %s", hostname, e)
            self._emit(Step.STABILITY, StepStatus.WARNING, f"Error: {e}")
            return None
        
        if result.success_rate >= 100.0:
            status = StepStatus.SUCCESS
        elif result.success_rate >= 80.0:
            status = StepStatus.WARNING
        else:
            status = StepStatus.ERROR
        
        self._emit(
            Step.STABILITY, status,
            f"{result.success_rate:.0f}% succeeded, avg {result.avg_ms:.0f}ms, "
            f"jitter {result.jitter_ms:.0f}ms"
        )
        return result


async def _reraise_as_probe_error(probe: Awaitable[T]) -> T:
    try:
        return await probe
    except ProbeError:
        raise
    except Exception as e:
        raise ProbeError(str(e) or type(e).__name__) from e


def _timeout_message(error: ProbeTimeoutError) -> str:
    return f"Timed out after {error.timeout:g}s"
