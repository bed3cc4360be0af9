from datetime import date, datetime, time, timedelta

import pytest

from clinic_agenda.core.scoring import SCORING_RULES, ScoringRule, score_slot
from clinic_agenda.core.slots import AvailableSlot, Preferences, generate_candidate_slots

EMPTY_PREFERENCES = Preferences()


def _slot(hour: int, minute: int = 0, professional_id: str = 'prof-1') -> AvailableSlot:
    start = datetime(2024, 1, 15, hour, minute)
    return AvailableSlot(
        start=start,
        end=start + timedelta(minutes=30),
        professional_id=professional_id,
        professional_name='Ana Torres',
    )


def test_score_without_firing_rules_is_base_score() -> None:
    assert score_slot(_slot(14), EMPTY_PREFERENCES) == (50, 'Slot disponible')


@pytest.mark.parametrize(('hour', 'minute'), [(7, 0), (10, 0), (14, 0), (20, 30)])
def test_missing_preferences_block_gives_flat_base_score(hour: int, minute: int) -> None:
    assert score_slot(_slot(hour, minute)) == (50, 'Slot disponible')
    assert score_slot(_slot(hour, minute), None) == (50, 'Slot disponible')


def test_preferred_professional_bonus_only_applies_to_that_professional() -> None:
    preferences = Preferences(preferred_professional_id='prof-1')

    assert score_slot(_slot(14), preferences) == (80, 'Profesional preferido')
    assert score_slot(_slot(14, professional_id='prof-2'), preferences) == (50, 'Slot disponible')


@pytest.mark.parametrize(
    ('hour', 'minute', 'expected_score'),
    [(8, 0, 50), (9, 0, 80), (10, 0, 80), (12, 0, 70), (12, 15, 50), (13, 0, 50)],
)
def test_preferred_hours_bonus_is_inclusive_at_both_ends(hour: int, minute: int, expected_score: int) -> None:
    preferences = Preferences(preferred_start=time(9, 0), preferred_end=time(12, 0))

    score, _ = score_slot(_slot(hour, minute), preferences)

    assert score == expected_score


def test_preferred_hours_bonus_needs_both_bounds() -> None:
    score, reason = score_slot(_slot(14), Preferences(preferred_start=time(9, 0)))

    assert score == 50
    assert 'Dentro de horario preferido' not in reason


@pytest.mark.parametrize(('hour', 'minute'), [(7, 0), (7, 45), (20, 0), (20, 30)])
def test_extreme_hours_are_penalized(hour: int, minute: int) -> None:
    assert score_slot(_slot(hour, minute), EMPTY_PREFERENCES) == (40, 'Horario no ideal')


@pytest.mark.parametrize(('hour', 'minute'), [(9, 0), (11, 45), (16, 0), (18, 45)])
def test_prime_hours_get_a_bonus(hour: int, minute: int) -> None:
    assert score_slot(_slot(hour, minute), EMPTY_PREFERENCES) == (60, 'Horario óptimo')


@pytest.mark.parametrize(('hour', 'minute'), [(8, 0), (12, 0), (14, 30), (15, 45), (19, 0), (19, 45)])
def test_regular_hours_are_neutral(hour: int, minute: int) -> None:
    assert score_slot(_slot(hour, minute), EMPTY_PREFERENCES) == (50, 'Slot disponible')


def test_preferred_professional_in_prime_hours() -> None:
    preferences = Preferences(preferred_professional_id='prof-1')

    assert score_slot(_slot(10), preferences) == (90, 'Profesional preferido, Horario óptimo')
    assert score_slot(_slot(10, professional_id='prof-2'), preferences) == (60, 'Horario óptimo')


def test_score_is_clamped_to_one_hundred() -> None:
    preferences = Preferences(
        preferred_start=time(9, 0),
        preferred_end=time(12, 0),
        preferred_professional_id='prof-1',
    )

    score, reason = score_slot(_slot(10), preferences)

    assert score == 100
    assert reason == 'Profesional preferido, Dentro de horario preferido, Horario óptimo'


def test_score_is_clamped_to_zero() -> None:
    rules = (ScoringRule('Penalización', -80, lambda slot, preferences: True),)

    assert score_slot(_slot(10), EMPTY_PREFERENCES, rules=rules) == (0, 'Penalización')


def test_every_matching_rule_is_applied_even_when_ranges_overlap() -> None:
    rules = (
        ScoringRule('Temprano', -10, lambda slot, preferences: slot.start.hour < 12),
        ScoringRule('Mañana', 10, lambda slot, preferences: slot.start.hour >= 9),
    )

    assert score_slot(_slot(10), EMPTY_PREFERENCES, rules=rules) == (50, 'Temprano, Mañana')


def test_rules_are_declared_in_a_fixed_order() -> None:
    assert [rule.label for rule in SCORING_RULES] == [
        'Profesional preferido',
        'Dentro de horario preferido',
        'Horario no ideal',
        'Horario óptimo',
    ]


@pytest.mark.parametrize(
    'preferences',
    [
        None,
        Preferences(preferred_professional_id='prof-1'),
        Preferences(preferred_start=time(7, 0), preferred_end=time(21, 0), preferred_professional_id='prof-1'),
        Preferences(preferred_start=time(19, 0), preferred_end=time(21, 0), exclude_lunch=True),
    ],
)
def test_scores_stay_within_bounds_for_every_slot_of_the_day(preferences: Preferences | None) -> None:
    for candidate in generate_candidate_slots(date(2024, 1, 15), 15):
        slot = AvailableSlot(
            start=candidate.start,
            end=candidate.end,
            professional_id='prof-1',
            professional_name='Ana Torres',
        )
        score, reason = score_slot(slot, preferences)

        assert 0 <= score <= 100
        assert reason
