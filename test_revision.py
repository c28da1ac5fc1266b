import unittest
from datetime import date, datetime, timedelta

from revision import (
    RevisionUnit,
    SortKey,
    StatusTier,
    Strength,
    aggregate_juz_from_surahs,
    aggregate_juz_strength_from_surahs,
    days_since,
    freshness_percent,
    needs_revision,
    revision_stats,
    revision_status,
    rotate_strength,
    sort_units,
    status_tier,
)

NOW = datetime(2024, 3, 15, 14, 30)


def revised(days_ago, number=1, strength=Strength.MEDIUM):
    return RevisionUnit(number, NOW - timedelta(days=days_ago), strength)


class DaysSinceTestCase(unittest.TestCase):
    def test_never_revised(self):
        self.assertIsNone(days_since(None, NOW))

    def test_same_calendar_day_is_zero(self):
        early = datetime(2024, 3, 15, 0, 1)
        late = datetime(2024, 3, 15, 23, 59)
        self.assertEqual(days_since(early, late), 0)
        self.assertEqual(days_since(late, early), 0)

    def test_counts_calendar_days_not_hours(self):
        # Less than 24 hours apart but across midnight
        self.assertEqual(days_since(datetime(2024, 3, 14, 23, 0), datetime(2024, 3, 15, 1, 0)), 1)
        self.assertEqual(days_since(NOW - timedelta(days=6), NOW), 6)

    def test_accepts_plain_date_for_today(self):
        self.assertEqual(days_since(datetime(2024, 3, 10, 9, 0), date(2024, 3, 15)), 5)

    def test_future_revision_is_never_negative(self):
        self.assertEqual(days_since(NOW + timedelta(days=2), NOW), 2)


class NeedsRevisionTestCase(unittest.TestCase):
    def test_never_revised_is_always_due(self):
        for cycle in (1, 7, 30):
            self.assertTrue(needs_revision(RevisionUnit(1), cycle, NOW))

    def test_due_exactly_at_cycle_boundary(self):
        for cycle in range(1, 11):
            for days in range(0, 21):
                self.assertEqual(needs_revision(revised(days), cycle, NOW), days >= cycle,
                                 f"cycle={cycle} days={days}")

    def test_rejects_non_positive_cycle(self):
        with self.assertRaises(ValueError):
            needs_revision(revised(1), 0, NOW)
        with self.assertRaises(ValueError):
            freshness_percent(revised(1), -3, NOW)


class FreshnessTestCase(unittest.TestCase):
    def test_full_on_revision_day(self):
        self.assertEqual(freshness_percent(revised(0), 7, NOW), 100)

    def test_never_revised_is_zero(self):
        self.assertEqual(freshness_percent(RevisionUnit(1), 7, NOW), 0)

    def test_six_of_seven_days(self):
        unit = revised(6)
        self.assertFalse(needs_revision(unit, 7, NOW))
        self.assertEqual(freshness_percent(unit, 7, NOW), 14)

    def test_zero_at_and_beyond_cycle(self):
        self.assertTrue(needs_revision(revised(7), 7, NOW))
        self.assertEqual(freshness_percent(revised(7), 7, NOW), 0)
        self.assertEqual(freshness_percent(revised(40), 7, NOW), 0)

    def test_half_rounds_up(self):
        # 100 - 1/8*100 = 87.5
        self.assertEqual(freshness_percent(revised(1), 8, NOW), 88)

    def test_monotonic_non_increasing(self):
        for cycle in (1, 3, 7, 14):
            values = [freshness_percent(revised(d), cycle, NOW) for d in range(0, 30)]
            self.assertEqual(values, sorted(values, reverse=True))
            self.assertTrue(all(0 <= v <= 100 for v in values))


class StatusTierTestCase(unittest.TestCase):
    def test_thresholds(self):
        cases = {
            0: StatusTier.CRITICAL, 25: StatusTier.CRITICAL,
            26: StatusTier.LOW, 50: StatusTier.LOW,
            51: StatusTier.MEDIUM, 75: StatusTier.MEDIUM,
            76: StatusTier.HIGH, 100: StatusTier.HIGH,
        }
        for percent, tier in cases.items():
            self.assertEqual(status_tier(percent), tier, percent)


class StrengthTestCase(unittest.TestCase):
    def test_rotation_order(self):
        self.assertEqual(rotate_strength(Strength.WEAK), Strength.MEDIUM)
        self.assertEqual(rotate_strength(Strength.MEDIUM), Strength.STRONG)
        self.assertEqual(rotate_strength(Strength.STRONG), Strength.WEAK)

    def test_three_rotations_is_identity(self):
        for strength in Strength:
            self.assertEqual(rotate_strength(rotate_strength(rotate_strength(strength))), strength)

    def test_accepts_raw_value(self):
        self.assertEqual(rotate_strength('Weak'), Strength.MEDIUM)


class AggregationTestCase(unittest.TestCase):
    def test_one_surah_outside_window(self):
        surahs = [revised(0, 17), revised(0, 18), revised(10, 19)]
        result = aggregate_juz_from_surahs(5, surahs, 7, NOW)
        self.assertEqual(result.juz, 5)
        self.assertFalse(result.all_revised_within_cycle)
        self.assertIsNone(result.most_recent_revision)

    def test_all_surahs_within_window(self):
        earlier = NOW - timedelta(hours=3)
        surahs = [
            RevisionUnit(17, earlier),
            RevisionUnit(18, NOW),
            RevisionUnit(19, earlier),
        ]
        result = aggregate_juz_from_surahs(5, surahs, 7, NOW)
        self.assertTrue(result.all_revised_within_cycle)
        self.assertEqual(result.most_recent_revision, NOW)

    def test_never_revised_surah_blocks(self):
        surahs = [revised(0, 17), RevisionUnit(18)]
        self.assertFalse(aggregate_juz_from_surahs(5, surahs, 7, NOW).all_revised_within_cycle)

    def test_window_is_measured_from_now(self):
        surahs = [revised(6, 1), revised(1, 2)]
        self.assertTrue(aggregate_juz_from_surahs(1, surahs, 7, NOW).all_revised_within_cycle)
        surahs = [RevisionUnit(1, NOW - timedelta(days=7, minutes=1)), revised(1, 2)]
        self.assertFalse(aggregate_juz_from_surahs(1, surahs, 7, NOW).all_revised_within_cycle)

    def test_empty_juz_does_not_qualify(self):
        self.assertFalse(aggregate_juz_from_surahs(1, [], 7, NOW).all_revised_within_cycle)
        self.assertFalse(aggregate_juz_strength_from_surahs(1, [], Strength.WEAK))

    def test_strength_requires_every_surah(self):
        surahs = [RevisionUnit(1, strength=Strength.WEAK), RevisionUnit(2, strength=Strength.MEDIUM)]
        self.assertFalse(aggregate_juz_strength_from_surahs(1, surahs, Strength.WEAK))
        surahs[1] = RevisionUnit(2, strength=Strength.WEAK)
        self.assertTrue(aggregate_juz_strength_from_surahs(1, surahs, Strength.WEAK))
        self.assertTrue(aggregate_juz_strength_from_surahs(1, surahs, 'Weak'))


class SortingTestCase(unittest.TestCase):
    def test_last_revised_order(self):
        never = RevisionUnit(1)
        recent = revised(3, 2)
        overdue = revised(8, 3)
        ordered = sort_units([recent, never, overdue], SortKey.LAST_REVISED, 7, NOW)
        self.assertEqual([u.number for u in ordered], [1, 3, 2])

    def test_due_units_ahead_of_not_due(self):
        units = [revised(2, 1), revised(7, 2), revised(5, 3), revised(12, 4)]
        ordered = sort_units(units, SortKey.LAST_REVISED, 7, NOW)
        self.assertEqual([u.number for u in ordered], [4, 2, 3, 1])

    def test_strength_weak_first_and_stable(self):
        units = [
            RevisionUnit(1, strength=Strength.STRONG),
            RevisionUnit(2, strength=Strength.WEAK),
            RevisionUnit(3, strength=Strength.MEDIUM),
            RevisionUnit(4, strength=Strength.WEAK),
        ]
        ordered = sort_units(units, SortKey.STRENGTH, 7, NOW)
        self.assertEqual([u.number for u in ordered], [2, 4, 3, 1])

    def test_number_ascending(self):
        units = [RevisionUnit(30), RevisionUnit(2), RevisionUnit(15)]
        ordered = sort_units(units, 'number', 7, NOW)
        self.assertEqual([u.number for u in ordered], [2, 15, 30])


class StatusSummaryTestCase(unittest.TestCase):
    def test_status_labels(self):
        self.assertEqual(revision_status(RevisionUnit(1), 7, NOW), 'Not Started')
        self.assertEqual(revision_status(revised(8), 7, NOW), 'Revise Now')
        self.assertEqual(revision_status(revised(2), 7, NOW), 'Relax')

    def test_stats(self):
        units = [RevisionUnit(1), revised(1, 2), revised(9, 3), revised(0, 4)]
        stats = revision_stats(units, 7, NOW)
        self.assertEqual(stats.need_revision, 2)
        self.assertEqual(stats.relaxed, 2)


if __name__ == '__main__':
    unittest.main()
