"""View models for the dashboard and Juz pages."""
import random
from dataclasses import dataclass, replace
from typing import List, Optional

from revision import (
    RevisionStats,
    SortKey,
    StatusTier,
    days_since,
    freshness_percent,
    needs_revision,
    revision_stats,
    revision_status,
    rotate_strength,
    sort_units,
    status_tier,
)
from surahs import JUZ_COUNT, get_surah, surahs_in_any_juz, surahs_in_juz

VIEW_JUZ = 'juz'
VIEW_SURAH = 'surah'

TIER_COLORS = {
    StatusTier.CRITICAL: '#EF4444', # red
    StatusTier.LOW: '#F59E0B', # yellow
    StatusTier.MEDIUM: '#10B981', # green
    StatusTier.HIGH: '#059669', # emerald
}

TIER_CARD_CLASSES = {
    StatusTier.CRITICAL: 'card-critical',
    StatusTier.LOW: 'card-low',
    StatusTier.MEDIUM: 'card-medium',
    StatusTier.HIGH: 'card-high',
}

STRENGTH_ICONS = {
    'Weak': '●○○',
    'Medium': '●●○',
    'Strong': '●●●',
}

MOTIVATIONAL_QUOTES = [
    "The Prophet ﷺ said:\n\n\"Be diligent in maintaining your connection with this Qur'an, "
    "for by the One in Whose hand is the soul of Muhammad, it escapes more easily than a "
    "camel from its tether.\"",
]


@dataclass(frozen=True)
class DashboardState:
    view_mode: str = VIEW_JUZ
    sort_by: SortKey = SortKey.NUMBER

    @classmethod
    def from_args(cls, args):
        view_mode = args.get('view', VIEW_JUZ)
        if view_mode not in (VIEW_JUZ, VIEW_SURAH):
            view_mode = VIEW_JUZ
        try:
            sort_by = SortKey(args.get('sort', SortKey.NUMBER.value))
        except ValueError:
            sort_by = SortKey.NUMBER
        return cls(view_mode=view_mode, sort_by=sort_by)

    def with_view(self, view_mode):
        return replace(self, view_mode=view_mode)

    def with_sort(self, sort_by):
        return replace(self, sort_by=SortKey(sort_by))

    def as_args(self):
        return {'view': self.view_mode, 'sort': self.sort_by.value}


@dataclass(frozen=True)
class UnitCard:
    kind: str # 'juz' or 'surah'
    number: int
    title: str
    subtitle: str
    last_revised: Optional[object]
    strength: str
    next_strength: str
    strength_icon: str
    days_since: Optional[int]
    days_label: str
    status_label: str
    needs_revision: bool
    freshness: int
    tier: StatusTier
    ring_color: str
    card_class: str

    def as_json(self):
        return {
            'kind': self.kind,
            'number': self.number,
            'last_revised': self.last_revised.isoformat() if self.last_revised else None,
            'strength': self.strength,
            'next_strength': self.next_strength,
            'days_since': self.days_since,
            'days_label': self.days_label,
            'status': self.status_label,
            'needs_revision': self.needs_revision,
            'freshness': self.freshness,
            'tier': self.tier.value,
            'ring_color': self.ring_color,
        }


@dataclass(frozen=True)
class DashboardView:
    state: DashboardState
    cards: List[UnitCard]
    stats: RevisionStats
    total_memorized: int
    total_juz: int
    quote: str


def _days_label(unit, days):
    if unit.last_revised is None:
        return 'Not started'
    if days == 0:
        return 'Revised today'
    if days == 1:
        return '1 day ago'
    return f'{days} days ago'


def build_card(kind, unit, cycle_days, now, title, subtitle=''):
    days = days_since(unit.last_revised, now)
    percent = freshness_percent(unit, cycle_days, now)
    tier = status_tier(percent)
    strength = unit.strength.value
    if unit.last_revised is None or percent <= 0:
        card_class = 'card-overdue'
    else:
        card_class = TIER_CARD_CLASSES[tier]
    return UnitCard(
        kind=kind,
        number=unit.number,
        title=title,
        subtitle=subtitle,
        last_revised=unit.last_revised,
        strength=strength,
        next_strength=rotate_strength(unit.strength).value,
        strength_icon=STRENGTH_ICONS[strength],
        days_since=days,
        days_label=_days_label(unit, days),
        status_label=revision_status(unit, cycle_days, now),
        needs_revision=needs_revision(unit, cycle_days, now),
        freshness=percent,
        tier=tier,
        ring_color=TIER_COLORS[tier],
        card_class=card_class,
    )


def juz_card(profile, juz, now):
    return build_card(VIEW_JUZ, profile.juz_progress[juz], profile.revision_cycle_days, now,
                      f'Juz {juz}')


def surah_card(profile, number, now):
    surah = get_surah(number)
    subtitle = 'Juz ' + ', '.join(str(j) for j in surah.juz)
    return build_card(VIEW_SURAH, profile.surah_unit(number), profile.revision_cycle_days, now,
                      f'{surah.number}. {surah.name}', subtitle)


def build_dashboard(profile, state, now, rng=random):
    cycle = profile.revision_cycle_days
    if state.view_mode == VIEW_SURAH:
        units = [profile.surah_unit(s.number) for s in surahs_in_any_juz(profile.memorized_juz)]
    else:
        units = [profile.juz_progress[j] for j in sorted(profile.memorized_juz)]

    ordered = sort_units(units, state.sort_by, cycle, now)
    if state.view_mode == VIEW_SURAH:
        cards = [surah_card(profile, unit.number, now) for unit in ordered]
    else:
        cards = [juz_card(profile, unit.number, now) for unit in ordered]

    return DashboardView(
        state=state,
        cards=cards,
        stats=revision_stats(units, cycle, now),
        total_memorized=len(profile.memorized_juz),
        total_juz=JUZ_COUNT,
        quote=rng.choice(MOTIVATIONAL_QUOTES),
    )


def build_juz_detail(profile, juz, now):
    """Juz card followed by the cards of the Surahs it contains."""
    header = juz_card(profile, juz, now)
    cards = [surah_card(profile, surah.number, now) for surah in surahs_in_juz(juz)]
    return header, cards
