"""Port describing delivery of record batches to the remote collector."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from lib_log_relay.domain.records import DeliveryRecord


@runtime_checkable
class TransportPort(Protocol):
    """Ship delivery records to the collector."""

    async def send(self, records: Sequence[DeliveryRecord]) -> bool:
        """Deliver ``records``; return ``True`` on a 2xx response.

        Network failures may raise; the scheduler treats them like a
        rejected batch.
        """

    def beacon(self, records: Sequence[DeliveryRecord]) -> None:
        """Hand ``records`` off without waiting for or observing a response."""

    async def aclose(self) -> None:
        """Release network resources."""


__all__ = ["TransportPort"]
