"""Forecast service webhook client with exponential backoff retry logic"""

import asyncio
import logging
import httpx
from typing import Any, Dict
from invoice_gateway.config import settings
from invoice_gateway.domain.exceptions import ForecastServiceError
from invoice_gateway.infrastructure.observability.metrics import (
    forecast_webhook_latency_histogram,
    forecast_webhook_failure_counter,
)

logger = logging.getLogger(__name__)


class ForecastClient:
    """Client notifying the cashflow forecast service that invoice periods moved"""

    def __init__(self, webhook_url: str | None = None, timeout: float | None = None):
        self.webhook_url = webhook_url or settings.forecast_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_event(self, payload: Dict[str, Any]) -> None:
        """
        Deliver an event to the forecast service.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1) between attempts
        - Retries on HTTP errors and network failures

        Raises:
            ForecastServiceError: When every attempt failed
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with forecast_webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    forecast_webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        raise ForecastServiceError(
                            f"Forecast webhook failed after {attempt} attempts: {e}"
                        ) from e

                    await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))

    async def invalidate_forecasts(self, pass_name: str, corrected: int, request_id: str) -> None:
        """
        Background task: tell the forecast service its cached projections are stale.

        Delivery failures are logged; the correction that triggered them has
        already been committed.
        """
        payload = {
            "event": "INVOICE_ALLOCATIONS_CHANGED",
            "pass": pass_name,
            "corrected": corrected,
            "request_id": request_id,
        }
        try:
            await self.send_event(payload)
        except ForecastServiceError as e:
            logger.error(f"Forecast invalidation failed: {e}", extra={"request_id": request_id})
