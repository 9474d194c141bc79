"""httpx-backed transport shipping record batches to the collector.

Purpose
-------
Implement :class:`TransportPort` with two delivery modes:

* :meth:`HttpxTransport.send` - awaited ``POST`` through a shared
  :class:`httpx.AsyncClient`; any 2xx counts as delivered.
* :meth:`HttpxTransport.beacon` - synchronous fire-and-forget ``POST`` with a
  short timeout, used from teardown callbacks where nothing asynchronous is
  guaranteed to run again. The response is never inspected.

System Role
-----------
Outermost network boundary. Failures are reported to the caller (the flush
scheduler), which owns requeue policy; this adapter only logs status codes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from lib_log_relay.application.ports.transport import TransportPort
from lib_log_relay.domain.records import DeliveryRecord, encode_batch

LOGGER = logging.getLogger(__name__)

_HEADERS = {"Content-Type": "application/json"}


def beacon_timeout_budget(total: float) -> httpx.Timeout:
    """Split ``total`` seconds evenly across the four httpx timeout phases.

    Examples
    --------
    >>> beacon_timeout_budget(2.0).as_dict()
    {'connect': 0.5, 'read': 0.5, 'write': 0.5, 'pool': 0.5}
    """

    return httpx.Timeout(total / 4)


class HttpxTransport(TransportPort):
    """Deliver batches as ``{"logs": [...]}`` JSON bodies.

    Examples
    --------
    >>> import asyncio
    >>> seen = []
    >>> def handler(request):
    ...     seen.append(request.url.path)
    ...     return httpx.Response(202)
    >>> transport = HttpxTransport(
    ...     "http://collector.test/api/v1/logs",
    ...     client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    ... )
    >>> asyncio.run(transport.send([]))
    True
    >>> seen
    ['/api/v1/logs']
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 10.0,
        beacon_timeout: float = 2.0,
        client: httpx.AsyncClient | None = None,
        beacon_client: httpx.Client | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._beacon_timeout = beacon_timeout_budget(beacon_timeout)
        self._client = client
        self._owns_client = client is None
        self._beacon_client = beacon_client

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _async_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(self, records: Sequence[DeliveryRecord]) -> bool:
        """POST ``records``; ``httpx.HTTPError`` propagates to the scheduler."""

        response = await self._async_client().post(self._endpoint, content=encode_batch(records), headers=_HEADERS)
        if response.is_success:
            LOGGER.debug("Delivered %d log records (%s)", len(records), response.status_code)
            return True
        LOGGER.warning("Failed to send logs to collector: %s", response.status_code)
        return False

    def beacon(self, records: Sequence[DeliveryRecord]) -> None:
        """POST ``records`` once without interpreting the response.

        Blocks the calling thread. Each httpx phase (pool, connect, write,
        read) gets a quarter of ``beacon_timeout``, so a dead collector holds
        teardown for roughly ``beacon_timeout`` seconds at worst.
        """

        body = encode_batch(records)
        if self._beacon_client is not None:
            self._beacon_client.post(self._endpoint, content=body, headers=_HEADERS, timeout=self._beacon_timeout)
            return
        with httpx.Client(timeout=self._beacon_timeout) as client:
            client.post(self._endpoint, content=body, headers=_HEADERS)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


__all__ = ["HttpxTransport", "beacon_timeout_budget"]
