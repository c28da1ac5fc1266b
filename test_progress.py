import os
os.environ['DATABASE_URL'] = 'sqlite://'

import unittest
from datetime import datetime, timedelta

from app import app, db
from models import User, JuzProgress, SurahProgress
import progress
from progress import ProfileValidationError, UnknownUnitError
from revision import Strength
from surahs import surahs_in_any_juz

NOW = datetime(2024, 3, 15, 9, 0)

class ProgressServiceTestCase(unittest.TestCase):
    def setUp(self):
        app.config['TESTING'] = True
        self.app_context = app.app_context()
        self.app_context.push()
        db.create_all()

        self.user = User(display_name='Hafiz', email='hafiz@example.com')
        self.user.set_password('password')
        db.session.add(self.user)
        db.session.commit()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def juz_row(self, number):
        return JuzProgress.query.filter_by(user_id=self.user.id, juz_number=number).first()

    def test_load_profile_shape(self):
        profile = progress.complete_setup(self.user, [3, 1, 3], 5)
        self.assertEqual(profile.memorized_juz, frozenset({1, 3}))
        self.assertEqual(profile.revision_cycle_days, 5)
        self.assertEqual(profile.juz_progress[1].strength, Strength.MEDIUM)
        self.assertEqual(profile.surah_progress, {})
        self.assertEqual([s.number for s in surahs_in_any_juz(profile.memorized_juz)], [1, 2, 3])

    def test_validation(self):
        with self.assertRaises(ProfileValidationError):
            progress.complete_setup(self.user, [], 7)
        with self.assertRaises(ProfileValidationError):
            progress.complete_setup(self.user, [31], 7)
        with self.assertRaises(ProfileValidationError):
            progress.complete_setup(self.user, ['x'], 7)
        with self.assertRaises(ProfileValidationError):
            progress.complete_setup(self.user, [1], -1)
        with self.assertRaises(ProfileValidationError):
            progress.complete_setup(self.user, [1], 400)
        with self.assertRaises(ProfileValidationError):
            progress.parse_strength('Perfect')
        self.assertIsNone(progress.parse_strength(None))
        self.assertFalse(self.user.setup_completed)

    def test_juz_revision_rolls_up_into_neighbouring_juz(self):
        progress.complete_setup(self.user, [1, 2, 3], 7)
        progress.mark_surah_revised(self.user, 1, NOW - timedelta(days=1))
        self.assertIsNone(self.juz_row(1).last_revised)

        # Juz 2 is entirely Al-Baqarah, which also closes out Juz 1
        profile = progress.mark_juz_revised(self.user, 2, NOW)
        self.assertEqual(profile.juz_progress[2].last_revised, NOW)
        self.assertEqual(profile.juz_progress[1].last_revised, NOW)
        # Aal-Imran still missing for Juz 3
        self.assertIsNone(profile.juz_progress[3].last_revised)

    def test_juz_is_not_downgraded_when_a_surah_drifts(self):
        progress.complete_setup(self.user, [1], 7)
        old = NOW - timedelta(days=20)
        progress.mark_juz_revised(self.user, 1, old)
        self.assertEqual(self.juz_row(1).last_revised, old)

        # Only one of the two Surahs is fresh, so the Juz keeps its old date
        progress.mark_surah_revised(self.user, 1, NOW)
        self.assertEqual(self.juz_row(1).last_revised, old)

        progress.mark_surah_revised(self.user, 2, NOW)
        self.assertEqual(self.juz_row(1).last_revised, NOW)

    def test_removed_juz_drops_progress_but_keeps_surahs(self):
        progress.complete_setup(self.user, [1, 2], 7)
        progress.mark_juz_revised(self.user, 1, NOW)
        profile = progress.update_profile(self.user, [2], 7)
        self.assertEqual(profile.memorized_juz, frozenset({2}))
        self.assertIsNone(self.juz_row(1))
        self.assertEqual(SurahProgress.query.filter_by(user_id=self.user.id).count(), 2)

    def test_unknown_units(self):
        progress.complete_setup(self.user, [30], 7)
        with self.assertRaises(UnknownUnitError):
            progress.mark_juz_revised(self.user, 1, NOW)
        with self.assertRaises(UnknownUnitError):
            progress.set_surah_strength(self.user, 2)
        with self.assertRaises(UnknownUnitError):
            progress.mark_surah_revised(self.user, 0, NOW)

    def test_strength_rotation_for_surah(self):
        progress.complete_setup(self.user, [30], 7)
        profile = progress.set_surah_strength(self.user, 114)
        self.assertEqual(profile.surah_progress[114].strength, Strength.STRONG)
        profile = progress.set_surah_strength(self.user, 114)
        self.assertEqual(profile.surah_progress[114].strength, Strength.WEAK)
        self.assertEqual(profile.juz_progress[30].strength, Strength.MEDIUM)

    def test_juz_strength_rolls_up_into_neighbouring_juz(self):
        progress.complete_setup(self.user, [1, 2], 7)
        progress.set_surah_strength(self.user, 1, Strength.STRONG)
        profile = progress.set_juz_strength(self.user, 2, Strength.STRONG)
        self.assertEqual(profile.juz_progress[2].strength, Strength.STRONG)
        self.assertEqual(profile.juz_progress[1].strength, Strength.STRONG)

if __name__ == '__main__':
    unittest.main()
