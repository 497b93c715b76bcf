"""
Notifications the simulation core publishes to outside observers.
The orchestrator queues notifications while a tick runs and flushes them once
the tick's state is final, so every observer sees each notification at most
once per tick and in publication order.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List


@dataclass(frozen=True)
class TickCompleted:
    turn: int
    regions_processed: int


@dataclass(frozen=True)
class RegionUpdated:
    turn: int
    region_id: str


@dataclass(frozen=True)
class MapColorsRefresh:
    turn: int


@dataclass(frozen=True)
class RegionNationChanged:
    region_id: str
    nation_id: str
    previous_nation_id: str = ""


class EconomicObserver:
    """
    Base class for observers of the simulation core.
    Handlers must not re-enter the tick; override only what you need.
    """

    def on_tick_completed(self, notification: TickCompleted):
        pass

    def on_region_updated(self, notification: RegionUpdated):
        pass

    def on_map_colors_refresh(self, notification: MapColorsRefresh):
        pass

    def on_region_nation_changed(self, notification: RegionNationChanged):
        pass


_HANDLERS = {
    TickCompleted: "on_tick_completed",
    RegionUpdated: "on_region_updated",
    MapColorsRefresh: "on_map_colors_refresh",
    RegionNationChanged: "on_region_nation_changed",
}


class NotificationQueue:
    """Ordered buffer of pending notifications and the observers they go to."""

    def __init__(self):
        self.observers: List[EconomicObserver] = []
        self.pending: List[Any] = []
        self.delivered_count = 0

    def attach(self, observer: EconomicObserver):
        if observer not in self.observers:
            self.observers.append(observer)

    def detach(self, observer: EconomicObserver):
        if observer in self.observers:
            self.observers.remove(observer)

    def publish(self, notification: Any):
        if type(notification) not in _HANDLERS:
            raise TypeError(f"Unknown notification type: {type(notification).__name__}")
        self.pending.append(notification)

    def flush(self) -> int:
        """Deliver and clear everything pending. Returns the number of notifications delivered."""
        batch, self.pending = self.pending, []
        for notification in batch:
            handler_name = _HANDLERS[type(notification)]
            for observer in list(self.observers):
                getattr(observer, handler_name)(notification)
        self.delivered_count += len(batch)
        return len(batch)


class NotificationLog(EconomicObserver):
    """Observer that records every notification it receives."""

    def __init__(self):
        self.entries: List[Any] = []

    def on_tick_completed(self, notification: TickCompleted):
        self.entries.append(notification)

    def on_region_updated(self, notification: RegionUpdated):
        self.entries.append(notification)

    def on_map_colors_refresh(self, notification: MapColorsRefresh):
        self.entries.append(notification)

    def on_region_nation_changed(self, notification: RegionNationChanged):
        self.entries.append(notification)

    def of_type(self, notification_type) -> List[Any]:
        return [e for e in self.entries if isinstance(e, notification_type)]

    def describe(self, entry: Any) -> str:
        if isinstance(entry, TickCompleted):
            return f"Turn {entry.turn}: economic tick processed {entry.regions_processed} regions"
        if isinstance(entry, RegionNationChanged):
            previous = entry.previous_nation_id or "independent"
            return f"Region {entry.region_id} moved from {previous} to {entry.nation_id}"
        if isinstance(entry, RegionUpdated):
            return f"Turn {entry.turn}: region {entry.region_id} updated"
        return f"Turn {entry.turn}: map colors refreshed"

    def to_records(self) -> List[Dict[str, Any]]:
        return [dict(type=type(e).__name__, **asdict(e)) for e in self.entries]

    def clear(self):
        self.entries.clear()
