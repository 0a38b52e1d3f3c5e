"""Live activity feed — bounded, most recent first."""

from __future__ import annotations

import itertools
from collections import deque
from datetime import datetime
from typing import Callable

from fleetiq_simulator.models.results import ActivityCategory, ActivityItem


class ActivityFeed:
    """Keeps the last ``max_items`` notifications, newest at index 0."""

    def __init__(self, max_items: int, now_fn: Callable[[], datetime]) -> None:
        self._items: deque[ActivityItem] = deque(maxlen=max_items)
        self._ids = itertools.count(1)
        self._now = now_fn

    def add(
        self,
        icon: str,
        message: str,
        category: ActivityCategory = "info",
        unit_id: str | None = None,
    ) -> ActivityItem:
        item = ActivityItem(
            id=next(self._ids),
            icon=icon,
            message=message,
            category=category,
            unit_id=unit_id,
            timestamp=self._now(),
        )
        self._items.appendleft(item)
        return item

    def items(self) -> list[ActivityItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
