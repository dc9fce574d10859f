# Copyright (c) Syntropy Systems
"""Keeping transcript statistics current while the page changes.

The controller moves through three states:

    UNATTACHED --start()--> ATTACHED              (table already on the page)
    UNATTACHED --start()--> SEARCHING --mutation--> ATTACHED

While searching it watches the whole document for inserted or removed nodes
and re-runs the locator. Once attached it watches the table body and
recomputes after the mutations have been quiet for `debounce_interval`.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Protocol

from gradewatch.config import GradewatchConfig
from gradewatch.dom import body_region
from gradewatch.locator import locate
from gradewatch.models.api import GET_STATS_MESSAGE, StatsResponse
from gradewatch.stats import compute_statistics, utc_now

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from bs4 import Tag

    from gradewatch.dom import MutationRecord, ObservableDocument, Subscription
    from gradewatch.models.stats import StatisticsSnapshot

logger = logging.getLogger(__name__)

STATUS_WAITING = "Waiting for transcript…"
STATUS_UP_TO_DATE = "Up to date"

SnapshotListener = Callable[["StatisticsSnapshot | None", str], None]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything that can run a callback later, like an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Schedules on whichever asyncio loop is running when a timer is set."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class ControllerState(str, Enum):
    UNATTACHED = "unattached"
    SEARCHING = "searching"
    ATTACHED = "attached"


class StatsController:
    """Owns the attached table, the pending timer and the latest snapshot."""

    def __init__(
        self,
        document: ObservableDocument,
        scheduler: Scheduler,
        config: GradewatchConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.document = document
        self.scheduler = scheduler
        self.config = config or GradewatchConfig()
        self.clock = clock

        self.state = ControllerState.UNATTACHED
        self.table: Tag | None = None
        self.snapshot: StatisticsSnapshot | None = None
        self.computations = 0

        self._pending: TimerHandle | None = None
        self._search_subscription: Subscription | None = None
        self._table_subscription: Subscription | None = None
        self._document_subscription: Subscription | None = None
        self._listeners: list[SnapshotListener] = []

    # --- Lifecycle ---

    def start(self) -> ControllerState:
        """Attach to the transcript table now, or start looking for it."""
        if self.state is not ControllerState.UNATTACHED:
            return self.state
        self._notify()
        table = self._locate()
        if table is not None:
            self._attach(table)
        else:
            self._search()
        return self.state

    @property
    def has_table(self) -> bool:
        return self.table is not None

    @property
    def status(self) -> str:
        return STATUS_UP_TO_DATE if self.snapshot is not None and self.has_table else STATUS_WAITING

    def add_listener(self, listener: SnapshotListener) -> None:
        """Call `listener(snapshot, status)` whenever the snapshot changes."""
        self._listeners.append(listener)

    def _locate(self) -> Tag | None:
        return locate(
            self.document.tables(),
            min_score=self.config.min_table_score,
            require_columns=self.config.require_columns,
        )

    def _search(self) -> None:
        self.state = ControllerState.SEARCHING
        logger.info("No transcript table yet, watching the page")
        if self._search_subscription is None:
            self._search_subscription = self.document.observe(
                self.document.body,
                self._on_document_mutation,
                child_list=True,
                subtree=True,
            )

    def _attach(self, table: Tag) -> None:
        if self._search_subscription is not None:
            self._search_subscription.disconnect()
            self._search_subscription = None

        self.table = table
        self.state = ControllerState.ATTACHED
        logger.info("Attached to transcript table")

        self.recompute()

        self._table_subscription = self.document.observe(
            body_region(table),
            self._on_table_mutation,
            child_list=True,
            character_data=True,
            subtree=True,
        )
        if self.config.reattach_on_detach:
            self._document_subscription = self.document.observe(
                self.document.body,
                self._on_detach_check,
                child_list=True,
                subtree=True,
            )

    def _detach(self) -> None:
        for subscription in (self._table_subscription, self._document_subscription):
            if subscription is not None:
                subscription.disconnect()
        self._table_subscription = None
        self._document_subscription = None
        self._cancel_pending()
        self.table = None

    # --- Mutation handling ---

    def _on_document_mutation(self, records: list[MutationRecord]) -> None:
        if self.state is not ControllerState.SEARCHING:
            return
        table = self._locate()
        if table is not None:
            self._attach(table)

    def _on_table_mutation(self, records: list[MutationRecord]) -> None:
        logger.debug("%d table mutation(s), debouncing", len(records))
        self._cancel_pending()
        self._pending = self.scheduler.call_later(self.config.debounce_interval, self._fire)

    def _on_detach_check(self, records: list[MutationRecord]) -> None:
        if self.table is None or self.document.contains(self.table):
            return
        logger.warning("Transcript table left the page, searching again")
        self._detach()
        self.state = ControllerState.UNATTACHED
        self._notify()
        table = self._locate()
        if table is not None:
            self._attach(table)
        else:
            self._search()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self) -> None:
        self._pending = None
        if self.table is not None:
            self.recompute()

    @property
    def has_pending_update(self) -> bool:
        return self._pending is not None

    # --- Snapshot cache ---

    def recompute(self) -> StatisticsSnapshot:
        """Recompute from the attached table and replace the cached snapshot."""
        if self.table is None:
            msg = "No transcript table attached"
            raise RuntimeError(msg)
        snapshot = compute_statistics(
            self.table,
            clock=self.clock,
            require_columns=self.config.require_columns,
        )
        self.snapshot = snapshot
        self.computations += 1
        logger.debug(
            "Recomputed: %d/%d courses included",
            snapshot.included_courses,
            snapshot.total_courses,
        )
        self._notify()
        return snapshot

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.snapshot, self.status)

    # --- Query protocol ---

    def query(self) -> StatsResponse:
        return StatsResponse(stats=self.snapshot, has_table=self.has_table)

    def handle_message(self, message: Mapping[str, object]) -> StatsResponse | None:
        """Answer a stats request; other message types are not ours."""
        if message.get("type") != GET_STATS_MESSAGE:
            return None
        return self.query()
