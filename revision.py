"""
Revision status engine.

Pure functions that turn a unit's last revision timestamp and the user's
revision cycle into display fields: days since revision, whether it is due,
a linear freshness percentage and a status tier. Also rolls Surah progress up
into Juz progress. Nothing here touches the database or the request.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Union


class Strength(str, Enum):
    WEAK = 'Weak'
    MEDIUM = 'Medium'
    STRONG = 'Strong'


class StatusTier(str, Enum):
    CRITICAL = 'Critical'
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'


class SortKey(str, Enum):
    NUMBER = 'number'
    LAST_REVISED = 'lastRevised'
    STRENGTH = 'strength'


DEFAULT_STRENGTH = Strength.MEDIUM

_NEXT_STRENGTH = {
    Strength.WEAK: Strength.MEDIUM,
    Strength.MEDIUM: Strength.STRONG,
    Strength.STRONG: Strength.WEAK,
}

# Weak sorts first
_STRENGTH_SEVERITY = {
    Strength.WEAK: 0,
    Strength.MEDIUM: 1,
    Strength.STRONG: 2,
}


@dataclass(frozen=True)
class RevisionUnit:
    """A Juz (1-30) or Surah (1-114) with its revision state."""
    number: int
    last_revised: Optional[datetime] = None
    strength: Strength = DEFAULT_STRENGTH


@dataclass(frozen=True)
class UserProfile:
    memorized_juz: FrozenSet[int]
    juz_progress: Dict[int, RevisionUnit]
    surah_progress: Dict[int, RevisionUnit]
    revision_cycle_days: int = 7

    def surah_unit(self, number: int) -> RevisionUnit:
        """Progress for a Surah, or a fresh unit if it was never touched."""
        return self.surah_progress.get(number) or RevisionUnit(number)


@dataclass(frozen=True)
class JuzAggregate:
    juz: int
    all_revised_within_cycle: bool
    most_recent_revision: Optional[datetime]


@dataclass(frozen=True)
class RevisionStats:
    need_revision: int
    relaxed: int


def _check_cycle(cycle_days: int) -> None:
    if cycle_days <= 0:
        raise ValueError(f"revision cycle must be positive, got {cycle_days}")


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_since(last_revised: Optional[datetime], today: Union[date, datetime]) -> Optional[int]:
    """
    Whole calendar days between the last revision and today.

    Both sides are truncated to their date first, so anything revised on the
    same calendar day counts as 0 regardless of the hour.
    """
    if last_revised is None:
        return None
    return abs((_as_date(today) - _as_date(last_revised)).days)


def needs_revision(unit: RevisionUnit, cycle_days: int, today: Union[date, datetime]) -> bool:
    _check_cycle(cycle_days)
    days = days_since(unit.last_revised, today)
    if days is None:
        return True
    return days >= cycle_days


def freshness_percent(unit: RevisionUnit, cycle_days: int, today: Union[date, datetime]) -> int:
    """Linear decay from 100 (revised today) to 0 at the cycle boundary."""
    _check_cycle(cycle_days)
    days = days_since(unit.last_revised, today)
    if days is None:
        return 0
    raw = 100 - days / cycle_days * 100
    # Half rounds up
    percent = math.floor(raw + 0.5)
    return min(100, max(0, percent))


def status_tier(percent: int) -> StatusTier:
    if percent <= 25:
        return StatusTier.CRITICAL
    if percent <= 50:
        return StatusTier.LOW
    if percent <= 75:
        return StatusTier.MEDIUM
    return StatusTier.HIGH


def rotate_strength(current: Strength) -> Strength:
    return _NEXT_STRENGTH[Strength(current)]


def revision_status(unit: RevisionUnit, cycle_days: int, today: Union[date, datetime]) -> str:
    if unit.last_revised is None:
        return 'Not Started'
    return 'Revise Now' if needs_revision(unit, cycle_days, today) else 'Relax'


def aggregate_juz_from_surahs(juz: int, surah_units: Iterable[RevisionUnit],
                              cycle_days: int, now: datetime) -> JuzAggregate:
    """
    Decide whether every Surah of a Juz was revised within the cycle.

    The window is measured back from ``now``, not from the Juz's own last
    revision. When all Surahs qualify, ``most_recent_revision`` is the latest
    of their timestamps; otherwise it is None and the caller must leave the
    Juz timestamp as it is. A Juz never gets downgraded here.
    """
    _check_cycle(cycle_days)
    units = list(surah_units)
    if not units:
        return JuzAggregate(juz, False, None)

    cycle_start = now - timedelta(days=cycle_days)
    for unit in units:
        if unit.last_revised is None or unit.last_revised < cycle_start:
            return JuzAggregate(juz, False, None)

    return JuzAggregate(juz, True, max(unit.last_revised for unit in units))


def aggregate_juz_strength_from_surahs(juz: int, surah_units: Iterable[RevisionUnit],
                                       proposed: Strength) -> bool:
    """True when every Surah in the Juz already carries ``proposed``."""
    units = list(surah_units)
    if not units:
        return False
    proposed = Strength(proposed)
    return all(unit.strength == proposed for unit in units)


def sort_units(units: Iterable[RevisionUnit], key: SortKey, cycle_days: int,
               today: Union[date, datetime]) -> List[RevisionUnit]:
    """
    Order units for display.

    ``lastRevised`` puts never-revised units first, then due units ahead of
    units that are not due, each group by most days since revision.
    ``strength`` goes Weak, Medium, Strong. Both keep input order on ties.
    """
    _check_cycle(cycle_days)
    key = SortKey(key)

    if key is SortKey.LAST_REVISED:
        def overdue_key(unit):
            days = days_since(unit.last_revised, today)
            if days is None:
                return (0, 0, 0)
            return (1, 0 if days >= cycle_days else 1, -days)
        return sorted(units, key=overdue_key)

    if key is SortKey.STRENGTH:
        return sorted(units, key=lambda unit: _STRENGTH_SEVERITY[Strength(unit.strength)])

    return sorted(units, key=lambda unit: unit.number)


def revision_stats(units: Iterable[RevisionUnit], cycle_days: int,
                   today: Union[date, datetime]) -> RevisionStats:
    need = relaxed = 0
    for unit in units:
        if needs_revision(unit, cycle_days, today):
            need += 1
        else:
            relaxed += 1
    return RevisionStats(need_revision=need, relaxed=relaxed)
