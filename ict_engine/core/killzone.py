"""
Kill zone clock: fixed daily UTC session windows.

Pure function of wall-clock time, independent of price data. Windows
whose end is earlier than their start wrap past midnight.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from .models import KillZone, KillZoneName, Volatility

MINUTES_PER_DAY = 24 * 60

Clock = Union[datetime, int, float, None]


@dataclass(frozen=True)
class KillZoneConfig:
    name: KillZoneName
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    volatility_expected: Volatility

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute


@dataclass
class NextKillZone:
    name: KillZoneName
    seconds: int


KILL_ZONE_CONFIGS = (
    KillZoneConfig(KillZoneName.ASIAN, 0, 0, 3, 0, Volatility.LOW),
    KillZoneConfig(KillZoneName.LONDON, 7, 0, 10, 0, Volatility.HIGH),
    KillZoneConfig(KillZoneName.NEW_YORK_AM, 12, 0, 15, 0, Volatility.HIGH),
    KillZoneConfig(KillZoneName.NEW_YORK_PM, 18, 30, 21, 0, Volatility.MEDIUM),
)

KILL_ZONE_LABELS = {
    KillZoneName.LONDON: "London Session",
    KillZoneName.NEW_YORK_AM: "New York AM",
    KillZoneName.NEW_YORK_PM: "New York PM",
    KillZoneName.ASIAN: "Asian Session",
}


def to_utc(now: Clock) -> datetime:
    """Accept a datetime (naive is read as UTC), Unix seconds, or None for now."""
    if now is None:
        return datetime.now(timezone.utc)
    if isinstance(now, datetime):
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)
    return datetime.fromtimestamp(now, tz=timezone.utc)


def _minute_of_day(now: Clock) -> int:
    current = to_utc(now)
    return current.hour * 60 + current.minute


def _format_time(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def _seconds_remaining(config: KillZoneConfig, current: int) -> Optional[int]:
    """Seconds until the window closes, or None when outside it."""
    start = config.start_minutes
    end = config.end_minutes

    # Overnight window: shift the end (and early-morning clock) by a day
    if end < start:
        end += MINUTES_PER_DAY
        if current < start:
            current += MINUTES_PER_DAY

    if start <= current < end:
        return (end - current) * 60
    return None


def get_kill_zone_status(
    symbol: str,
    now: Clock = None,
    configs: Sequence[KillZoneConfig] = KILL_ZONE_CONFIGS,
) -> List[KillZone]:
    """
    Evaluate every kill zone against the clock.

    Args:
        symbol: Instrument (all symbols share the same sessions)
        now: Clock reading; defaults to the current time
        configs: Session windows to evaluate

    Returns:
        One KillZone per config, in config order
    """
    current = _minute_of_day(now)
    zones: List[KillZone] = []

    for config in configs:
        remaining = _seconds_remaining(config, current)
        zones.append(KillZone(
            name=config.name,
            start_utc=_format_time(config.start_hour, config.start_minute),
            end_utc=_format_time(config.end_hour, config.end_minute),
            is_active=remaining is not None,
            volatility_expected=config.volatility_expected,
            time_remaining=remaining,
        ))

    return zones


def should_trade_now(
    symbol: str,
    now: Clock = None,
    configs: Sequence[KillZoneConfig] = KILL_ZONE_CONFIGS,
) -> bool:
    """True while a high-volatility kill zone is active."""
    return any(
        kz.is_active and kz.volatility_expected == Volatility.HIGH
        for kz in get_kill_zone_status(symbol, now, configs)
    )


def get_time_until_next_kill_zone(
    symbol: str,
    now: Clock = None,
    configs: Sequence[KillZoneConfig] = KILL_ZONE_CONFIGS,
) -> Optional[NextKillZone]:
    """
    Nearest upcoming high-volatility session start.

    A start earlier in the day than now counts as tomorrow's session.
    Returns None if no high-volatility session is configured.
    """
    current = _minute_of_day(now)
    best: Optional[NextKillZone] = None

    for config in configs:
        if config.volatility_expected != Volatility.HIGH:
            continue

        minutes = config.start_minutes - current
        if minutes < 0:
            minutes += MINUTES_PER_DAY

        if best is None or minutes * 60 < best.seconds:
            best = NextKillZone(name=config.name, seconds=minutes * 60)

    return best
