"""Delivery queue admission: enrich an entry and enqueue its record.

Purpose
-------
Turn an admitted :class:`LogEntry` into a :class:`DeliveryRecord` using the
identity/device context available *now*, so that a login that completed after
the entry was created is still reflected in the delivered record.

System Role
-----------
Called by the ingestion pipeline for entries at or above the server level;
the resulting record is handed to the flush scheduler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from lib_log_relay.application.ports.enrichment import EnrichmentPort
from lib_log_relay.domain.delivery_queue import DeliveryQueue
from lib_log_relay.domain.enrichment import UNKNOWN_DEVICE, UNKNOWN_ROLE, EnrichmentSnapshot
from lib_log_relay.domain.events import LogEntry
from lib_log_relay.domain.records import DeliveryRecord

from ._diagnostics import Emit

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(accessor: Callable[[], T], fallback: T, name: str) -> T:
    try:
        value = accessor()
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("Enrichment accessor %s failed; using fallback", name, exc_info=exc)
        return fallback
    return fallback if value is None else value


def resolve_enrichment(source: EnrichmentPort) -> EnrichmentSnapshot:
    """Query every accessor of ``source`` best-effort.

    Examples
    --------
    >>> class Broken:
    ...     def current_user_id(self): raise RuntimeError("store offline")
    ...     def current_display_name(self): return None
    ...     def current_role(self): return "PRESENTER"
    ...     def device_descriptor(self): return "Chrome (Linux)"
    ...     def current_view(self): return "/"
    >>> snapshot = resolve_enrichment(Broken())
    >>> snapshot.user_id is None, snapshot.user_role
    (True, 'PRESENTER')
    """

    return EnrichmentSnapshot(
        user_id=_guarded(source.current_user_id, None, "current_user_id"),
        user_display_name=_guarded(source.current_display_name, None, "current_display_name"),
        user_role=_guarded(source.current_role, UNKNOWN_ROLE, "current_role"),
        device_descriptor=_guarded(source.device_descriptor, UNKNOWN_DEVICE, "device_descriptor"),
    )


def create_admission(
    *,
    queue: DeliveryQueue,
    enrichment: EnrichmentPort,
    client_version: str,
    emit: Emit,
) -> Callable[[LogEntry], DeliveryRecord]:
    """Return the callable admitting entries into ``queue``.

    When the queue is full the oldest record is evicted before the new one is
    appended; the newest record is never rejected.
    """

    def admit(entry: LogEntry) -> DeliveryRecord:
        record = DeliveryRecord.from_entry(entry, resolve_enrichment(enrichment), client_version=client_version)
        evicted = queue.append(record)
        if evicted is not None:
            emit("queue_evicted", {"tag": evicted.tag, "timestamp": evicted.timestamp_ms})
        emit("entry_admitted", {"tag": record.tag, "level": record.level.name, "queued": len(queue)})
        return record

    return admit


__all__ = ["create_admission", "resolve_enrichment"]
