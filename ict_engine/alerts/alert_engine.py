"""
Alert Engine

Turns analysis snapshots into user alerts: kill zone activations, price
approaching a confluence zone, and new entry signals. Each alert fires
once; the engine remembers what it has already alerted on.
"""

import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..calculations.lot_size import calculate_pips
from ..core.killzone import KILL_ZONE_LABELS
from ..core.models import ConfluenceZone, EntrySignal, ICTAnalysis, KillZone

logger = logging.getLogger(__name__)

HIGH_PRIORITY_THRESHOLD = 70

# Alerted zone and signal ids kept per engine; the oldest are forgotten first
MAX_TRACKED_IDS = 500


class AlertType(Enum):
    SETUP = "setup"
    PRICE = "price"
    KILLZONE = "killzone"
    ENTRY = "entry"
    INFO = "info"


class AlertPriority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class AlertConfig:
    """Alert switches and thresholds"""
    confluence_proximity_pips: float = 20.0
    enable_kill_zone_alerts: bool = True
    enable_setup_alerts: bool = True
    enable_entry_alerts: bool = True


@dataclass
class Alert:
    """Generated alert"""
    id: str
    type: AlertType
    title: str
    message: str
    priority: AlertPriority
    timestamp: str = ""
    read: bool = False

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        data["priority"] = self.priority.value
        return data


class AlertStore:
    """Bounded in-memory alert list, newest first"""

    def __init__(self, max_alerts: int = 100):
        self.max_alerts = max_alerts
        self._alerts: List[Alert] = []

    def add(self, alert: Alert) -> Alert:
        self._alerts.insert(0, alert)
        del self._alerts[self.max_alerts:]
        return alert

    def all(self) -> List[Alert]:
        return list(self._alerts)

    def unread(self) -> List[Alert]:
        return [a for a in self._alerts if not a.read]

    def mark_read(self, alert_id: str) -> bool:
        for alert in self._alerts:
            if alert.id == alert_id:
                alert.read = True
                return True
        return False

    def clear(self):
        self._alerts.clear()

    def __len__(self):
        return len(self._alerts)


class AlertEngine:
    """
    Evaluates analysis output against the alert config.

    State (last active kill zone, alerted zone and signal ids) lives on the
    instance, so independent engines never share it.
    """

    def __init__(
        self,
        store: Optional[AlertStore] = None,
        config: Optional[AlertConfig] = None,
        max_tracked_ids: int = MAX_TRACKED_IDS,
    ):
        self.store = store if store is not None else AlertStore()
        self.config = config or AlertConfig()
        self.max_tracked_ids = max_tracked_ids
        self._last_kill_zone: Optional[str] = None
        # Insertion ordered, used as bounded sets
        self._alerted_zones: Dict[str, None] = {}
        self._alerted_signals: Dict[str, None] = {}

    def _remember(self, seen: Dict[str, None], item_id: str) -> None:
        seen[item_id] = None
        while len(seen) > self.max_tracked_ids:
            del seen[next(iter(seen))]

    def update_config(self, **changes) -> AlertConfig:
        for key, value in changes.items():
            if not hasattr(self.config, key):
                raise AttributeError(f"Unknown alert setting: {key}")
            setattr(self.config, key, value)
        return self.config

    def _create_alert(
        self,
        alert_type: AlertType,
        title: str,
        message: str,
        priority: AlertPriority,
    ) -> Alert:
        alert = Alert(
            id=uuid.uuid4().hex,
            type=alert_type,
            title=title,
            message=message,
            priority=priority,
        )
        logger.info(f"[Alert] {alert_type.value}/{priority.value}: {title}")
        return self.store.add(alert)

    def check_kill_zone_alerts(self, kill_zones: Sequence[KillZone]) -> List[Alert]:
        """Alert once when a kill zone becomes active."""
        if not self.config.enable_kill_zone_alerts:
            return []

        active = next((kz for kz in kill_zones if kz.is_active), None)
        if active is None:
            self._last_kill_zone = None
            return []

        if self._last_kill_zone == active.name.value:
            return []

        self._last_kill_zone = active.name.value
        label = KILL_ZONE_LABELS.get(active.name, active.name.value)
        return [self._create_alert(
            AlertType.KILLZONE,
            f"{label} Active",
            f"Trading session is now active. {active.volatility_expected.value.capitalize()} volatility expected.",
            AlertPriority.MEDIUM,
        )]

    def check_confluence_alerts(
        self,
        confluence_zones: Sequence[ConfluenceZone],
        current_price: float,
        symbol: str,
    ) -> List[Alert]:
        """Alert once per zone when price comes within the proximity distance."""
        if not self.config.enable_setup_alerts:
            return []

        alerts = []
        for zone in confluence_zones:
            if zone.id in self._alerted_zones:
                continue

            distance_pips = min(
                calculate_pips(current_price, zone.overlap_top, symbol),
                calculate_pips(current_price, zone.overlap_bottom, symbol),
            )
            if distance_pips > self.config.confluence_proximity_pips:
                continue

            self._remember(self._alerted_zones, zone.id)
            priority = AlertPriority.HIGH if zone.strength >= HIGH_PRIORITY_THRESHOLD else AlertPriority.MEDIUM
            alerts.append(self._create_alert(
                AlertType.SETUP,
                "Confluence Zone Approaching",
                f"Price is {distance_pips:.1f} pips from {zone.type.value} confluence zone at {zone.overlap_top:.5f}",
                priority,
            ))

        return alerts

    def check_entry_signals(self, entry_signals: Sequence[EntrySignal]) -> List[Alert]:
        """Alert once per entry signal id."""
        if not self.config.enable_entry_alerts:
            return []

        alerts = []
        for signal in entry_signals:
            if signal.id in self._alerted_signals:
                continue

            self._remember(self._alerted_signals, signal.id)
            priority = AlertPriority.HIGH if signal.confidence >= HIGH_PRIORITY_THRESHOLD else AlertPriority.MEDIUM
            alerts.append(self._create_alert(
                AlertType.ENTRY,
                f"Entry Signal: {signal.direction.value.upper()}",
                f"Sweep & Shift detected. Entry: {signal.suggested_entry:.5f}, "
                f"SL: {signal.suggested_sl:.5f}, R:R: {signal.risk_reward_ratio:.1f}",
                priority,
            ))

        return alerts

    def process(self, analysis: ICTAnalysis, current_price: float) -> List[Alert]:
        """Run every check against one snapshot."""
        alerts = self.check_kill_zone_alerts(analysis.kill_zones)
        alerts += self.check_confluence_alerts(analysis.confluence_zones, current_price, analysis.symbol)
        alerts += self.check_entry_signals(analysis.entry_signals)
        return alerts

    def clear_alerted_zones(self):
        self._alerted_zones.clear()

    def clear_alerted_signals(self):
        self._alerted_signals.clear()
