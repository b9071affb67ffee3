"""HTTP health probes for inference providers.

Each probe is a GET against `<base_url><endpoint>` (default `/health`). A
non-2xx answer falls back to `/v1/models`, which most OpenAI-compatible
servers expose. Failures never raise: they are stored on the provider's
status record.

Example:
    >>> monitor = ProviderHealthMonitor()
    >>> status = await monitor.check_provider("local", ProviderConfig(base_url="http://127.0.0.1:8000"))
    >>> status.healthy
    True
    >>> monitor.start({"local": config})  # periodic checks on the running loop
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from tagcall.foundation.config import HealthSettings, ProviderConfig, get_settings
from tagcall.foundation.errors import TagcallError
from tagcall.runtime.observability import get_logger

log = get_logger("tagcall.health")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ProviderHealthStatus(BaseModel):
    """Last known health of one provider."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    provider: str
    base_url: str
    healthy: bool
    last_checked_at: int
    last_healthy_at: int | None = None
    latency_ms: float | None = None
    error: str | None = None
    consecutive_failures: NonNegativeInt = 0


class ProviderHealthSnapshot(BaseModel):
    """Health of every provider checked so far."""

    model_config = ConfigDict(frozen=True)

    providers: dict[str, ProviderHealthStatus] = Field(default_factory=dict)
    checked_at: int


class ProviderHealthMonitor:
    """Probes providers and caches the last status per provider.

    State lives on the instance: create one per process (or per test) and
    call `reset()` to forget previous results.
    """

    __slots__ = ("_settings", "_timeout", "_client", "_owns_client", "_state", "_task")

    def __init__(
        self,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        settings: HealthSettings | None = None,
    ) -> None:
        self._settings = settings or get_settings().health
        self._timeout = timeout if timeout is not None else self._settings.timeout
        self._client = client
        self._owns_client = client is None
        self._state: dict[str, ProviderHealthStatus] = {}
        self._task: asyncio.Task[None] | None = None

    # ─────────────────────────────────────────────────────────────────
    # HTTP Client
    # ─────────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        """Stop periodic checks and close the client if this monitor created it."""
        self.stop()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ─────────────────────────────────────────────────────────────────
    # Probing
    # ─────────────────────────────────────────────────────────────────

    async def _get(self, url: str, config: ProviderConfig) -> httpx.Response:
        headers = {"Authorization": f"Bearer {config.api_key.get_secret_value()}"} if config.api_key else {}
        return await self._get_client().get(url, headers=headers, timeout=self._timeout)

    async def _probe(self, provider_id: str, config: ProviderConfig) -> ProviderHealthStatus:
        base_url = config.base_url
        endpoint = (config.health_check and config.health_check.endpoint) or self._settings.default_endpoint
        fallback = self._settings.fallback_endpoint
        start = time.perf_counter()

        def status(healthy: bool, error: str | None = None) -> ProviderHealthStatus:
            now = _now_ms()
            return ProviderHealthStatus(
                provider=provider_id,
                base_url=base_url,
                healthy=healthy,
                last_checked_at=now,
                last_healthy_at=now if healthy else None,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                error=error,
            )

        try:
            response = await self._get(f"{base_url}{endpoint}", config)
        except httpx.TimeoutException:
            return status(False, f"Health check timed out ({self._timeout:g}s)")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return status(False, TagcallError.from_exception("health", e).message)

        if response.is_success:
            return status(True)

        if endpoint != fallback:
            try:
                fallback_response = await self._get(f"{base_url}{fallback}", config)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                log.debug("fallback probe failed", provider=provider_id, error=str(e))
            else:
                if fallback_response.is_success:
                    return status(True)

        return status(False, f"HTTP {response.status_code}: {response.reason_phrase}")

    async def check_provider(self, provider_id: str, config: ProviderConfig) -> ProviderHealthStatus:
        """Probe one provider now and store the result."""
        result = await self._probe(provider_id, config)

        previous = self._state.get(provider_id)
        if previous is not None:
            result = result.model_copy(update={
                "last_healthy_at": result.last_healthy_at if result.healthy else previous.last_healthy_at,
                "consecutive_failures": 0 if result.healthy else previous.consecutive_failures + 1,
            })
        elif not result.healthy:
            result = result.model_copy(update={"consecutive_failures": 1})

        self._state[provider_id] = result
        if result.healthy:
            log.debug("provider healthy", provider=provider_id, latency_ms=result.latency_ms)
        else:
            log.warning(
                "provider unhealthy",
                provider=provider_id,
                error=result.error,
                consecutive_failures=result.consecutive_failures,
            )
        return result

    async def check_all(self, providers: Mapping[str, ProviderConfig]) -> ProviderHealthSnapshot:
        """Probe every provider with health checks enabled, concurrently."""
        await asyncio.gather(*(
            self.check_provider(pid, cfg)
            for pid, cfg in providers.items()
            if cfg.health_check is None or cfg.health_check.enabled
        ))
        return self.snapshot()

    def snapshot(self) -> ProviderHealthSnapshot:
        return ProviderHealthSnapshot(providers=dict(self._state), checked_at=_now_ms())

    def get(self, provider_id: str) -> ProviderHealthStatus | None:
        return self._state.get(provider_id)

    def reset(self) -> None:
        """Stop periodic checks and forget all statuses."""
        self.stop()
        self._state.clear()

    # ─────────────────────────────────────────────────────────────────
    # Periodic Monitoring
    # ─────────────────────────────────────────────────────────────────

    def interval_for(self, providers: Mapping[str, ProviderConfig]) -> float:
        """Shortest configured interval, capped by the settings default."""
        interval = self._settings.interval_seconds
        for cfg in providers.values():
            configured = cfg.health_check.interval_seconds if cfg.health_check else None
            if configured:
                interval = min(interval, configured)
        return interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, providers: Mapping[str, ProviderConfig]) -> None:
        """Check now and then periodically. Must be called on a running event loop."""
        self.stop()
        interval = self.interval_for(providers)
        self._task = asyncio.get_running_loop().create_task(
            self._run(dict(providers), interval), name="tagcall-provider-health",
        )
        log.info("provider health monitor started", providers=len(providers), interval_seconds=interval)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, providers: dict[str, ProviderConfig], interval: float) -> None:
        while True:
            try:
                await self.check_all(providers)
            except Exception as e:
                # keep polling; the next round may succeed
                log.exception("provider health round failed", error=str(e))
            await asyncio.sleep(interval)
