"""
Reads and writes of a user's memorization progress.

Every mutation runs as one read-modify-write transaction: rows are changed in
the session, committed, and only then is the refreshed profile returned. A
failed commit is rolled back and surfaces as StorageWriteError.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from models import db, JuzProgress, SurahProgress
from revision import (
    DEFAULT_STRENGTH,
    RevisionUnit,
    Strength,
    UserProfile,
    aggregate_juz_from_surahs,
    aggregate_juz_strength_from_surahs,
    rotate_strength,
)
from surahs import SURAH_COUNT, get_surah, is_valid_juz, surahs_in_juz

logger = logging.getLogger(__name__)


class StorageWriteError(Exception):
    """The database refused or failed a write; nothing was applied."""


class UnknownUnitError(LookupError):
    """The Juz or Surah is not part of the user's memorized set."""


class ProfileValidationError(ValueError):
    pass


def _row_unit(row, number):
    if row is None:
        return RevisionUnit(number)
    return RevisionUnit(number, row.last_revised, Strength(row.strength))


def _juz_rows(user):
    return {row.juz_number: row for row in JuzProgress.query.filter_by(user_id=user.id).all()}


def _surah_rows(user):
    return {row.surah_number: row for row in SurahProgress.query.filter_by(user_id=user.id).all()}


def _ensure_surah_row(user, rows, number):
    row = rows.get(number)
    if row is None:
        row = SurahProgress(user_id=user.id, surah_number=number,
                            last_revised=None, strength=DEFAULT_STRENGTH.value)
        db.session.add(row)
        rows[number] = row
    return row


@contextmanager
def _transaction(action):
    try:
        yield
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to %s", action)
        raise StorageWriteError(f"Could not {action}.") from e


def load_profile(user):
    juz = {number: _row_unit(row, number) for number, row in _juz_rows(user).items()}
    surah = {number: _row_unit(row, number) for number, row in _surah_rows(user).items()}
    return UserProfile(
        memorized_juz=frozenset(juz),
        juz_progress=juz,
        surah_progress=surah,
        revision_cycle_days=user.revision_cycle or 7,
    )


# --- Validation ---

def validate_juz_selection(juz_numbers):
    try:
        selected = sorted({int(n) for n in juz_numbers})
    except (TypeError, ValueError):
        raise ProfileValidationError('Invalid Juz selection.')
    if not selected:
        raise ProfileValidationError('Select at least one Juz.')
    if not all(is_valid_juz(n) for n in selected):
        raise ProfileValidationError('Juz numbers must be between 1 and 30.')
    return selected


def validate_cycle(cycle_days, max_cycle=365):
    try:
        cycle = int(cycle_days)
    except (TypeError, ValueError):
        raise ProfileValidationError('Revision cycle must be a whole number of days.')
    if cycle <= 0 or cycle > max_cycle:
        raise ProfileValidationError(f'Revision cycle must be between 1 and {max_cycle} days.')
    return cycle


def parse_strength(value):
    if value is None:
        return None
    try:
        return Strength(value)
    except ValueError:
        raise ProfileValidationError(f'Unknown strength: {value}')


# --- Profile ---

def _sync_memorized(user, juz_numbers):
    existing = _juz_rows(user)
    wanted = set(juz_numbers)
    for number in sorted(wanted - set(existing)):
        db.session.add(JuzProgress(user_id=user.id, juz_number=number,
                                   last_revised=None, strength=DEFAULT_STRENGTH.value))
    for number, row in existing.items():
        if number not in wanted:
            db.session.delete(row)
    return sorted(wanted - set(existing)), sorted(set(existing) - wanted)


def complete_setup(user, juz_numbers, cycle_days, max_cycle=365):
    selected = validate_juz_selection(juz_numbers)
    cycle = validate_cycle(cycle_days, max_cycle)
    with _transaction('save profile'):
        _sync_memorized(user, selected)
        user.revision_cycle = cycle
        user.setup_completed = True
    logger.info("User %s completed setup with %d Juz, %d day cycle", user.id, len(selected), cycle)
    return load_profile(user)


def update_profile(user, juz_numbers, cycle_days, max_cycle=365):
    selected = validate_juz_selection(juz_numbers)
    cycle = validate_cycle(cycle_days, max_cycle)
    with _transaction('update profile'):
        added, removed = _sync_memorized(user, selected)
        user.revision_cycle = cycle
    logger.info("User %s profile updated: +%s -%s, cycle %d", user.id, added, removed, cycle)
    return load_profile(user)


# --- Juz rollups ---

def _rollup_revision(juz_rows, surah_rows, juz_numbers, cycle_days, now):
    for juz in sorted(juz_numbers):
        row = juz_rows.get(juz)
        if row is None:
            continue
        units = [_row_unit(surah_rows.get(s.number), s.number) for s in surahs_in_juz(juz)]
        aggregate = aggregate_juz_from_surahs(juz, units, cycle_days, now)
        if aggregate.all_revised_within_cycle:
            row.last_revised = aggregate.most_recent_revision


def _rollup_strength(juz_rows, surah_rows, juz_numbers, strength):
    for juz in sorted(juz_numbers):
        row = juz_rows.get(juz)
        if row is None:
            continue
        units = [_row_unit(surah_rows.get(s.number), s.number) for s in surahs_in_juz(juz)]
        if aggregate_juz_strength_from_surahs(juz, units, strength):
            row.strength = strength.value


def _memorized_juz_row(juz_rows, juz):
    row = juz_rows.get(juz)
    if row is None:
        raise UnknownUnitError(f'Juz {juz} is not in your memorized list.')
    return row


def _memorized_surah(juz_rows, number):
    if not 1 <= number <= SURAH_COUNT:
        raise UnknownUnitError(f'Surah {number} does not exist.')
    surah = get_surah(number)
    if not set(surah.juz) & set(juz_rows):
        raise UnknownUnitError(f'Surah {number} is not in your memorized Juz.')
    return surah


# --- Mutations ---

def mark_juz_revised(user, juz, when):
    juz_rows = _juz_rows(user)
    row = _memorized_juz_row(juz_rows, juz)
    with _transaction(f'mark Juz {juz} revised'):
        surah_rows = _surah_rows(user)
        row.last_revised = when
        neighbours = set()
        for surah in surahs_in_juz(juz):
            _ensure_surah_row(user, surah_rows, surah.number).last_revised = when
            neighbours.update(surah.juz)
        neighbours.discard(juz)
        _rollup_revision(juz_rows, surah_rows, neighbours, user.revision_cycle, when)
    logger.info("User %s revised Juz %s", user.id, juz)
    return load_profile(user)


def mark_surah_revised(user, number, when):
    juz_rows = _juz_rows(user)
    surah = _memorized_surah(juz_rows, number)
    with _transaction(f'mark Surah {number} revised'):
        surah_rows = _surah_rows(user)
        _ensure_surah_row(user, surah_rows, number).last_revised = when
        _rollup_revision(juz_rows, surah_rows, surah.juz, user.revision_cycle, when)
    logger.info("User %s revised Surah %s", user.id, number)
    return load_profile(user)


def set_juz_strength(user, juz, strength=None):
    """Apply ``strength`` to a Juz and its Surahs; None rotates the current one."""
    juz_rows = _juz_rows(user)
    row = _memorized_juz_row(juz_rows, juz)
    if strength is None:
        strength = rotate_strength(Strength(row.strength))
    with _transaction(f'change Juz {juz} strength'):
        surah_rows = _surah_rows(user)
        row.strength = strength.value
        neighbours = set()
        for surah in surahs_in_juz(juz):
            _ensure_surah_row(user, surah_rows, surah.number).strength = strength.value
            neighbours.update(surah.juz)
        neighbours.discard(juz)
        _rollup_strength(juz_rows, surah_rows, neighbours, strength)
    logger.info("User %s set Juz %s strength to %s", user.id, juz, strength.value)
    return load_profile(user)


def set_surah_strength(user, number, strength=None):
    juz_rows = _juz_rows(user)
    surah = _memorized_surah(juz_rows, number)
    surah_rows = _surah_rows(user)
    if strength is None:
        strength = rotate_strength(_row_unit(surah_rows.get(number), number).strength)
    with _transaction(f'change Surah {number} strength'):
        _ensure_surah_row(user, surah_rows, number).strength = strength.value
        _rollup_strength(juz_rows, surah_rows, surah.juz, strength)
    logger.info("User %s set Surah %s strength to %s", user.id, number, strength.value)
    return load_profile(user)
