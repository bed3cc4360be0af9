from typing import Callable, NamedTuple

from clinic_agenda.core.slots import AvailableSlot, Preferences, minutes_since_midnight

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100
DEFAULT_REASON = 'Slot disponible'


class ScoringRule(NamedTuple):
    label: str
    points: int
    applies: Callable[[AvailableSlot, Preferences | None], bool]


def is_preferred_professional(slot: AvailableSlot, preferences: Preferences | None) -> bool:
    return (
        preferences is not None
        and preferences.preferred_professional_id is not None
        and slot.professional_id == preferences.preferred_professional_id
    )


def is_within_preferred_hours(slot: AvailableSlot, preferences: Preferences | None) -> bool:
    if preferences is None or preferences.preferred_start is None or preferences.preferred_end is None:
        return False

    slot_minutes = minutes_since_midnight(slot.start.time())
    return (
        minutes_since_midnight(preferences.preferred_start)
        <= slot_minutes
        <= minutes_since_midnight(preferences.preferred_end)
    )


def is_extreme_hour(slot: AvailableSlot, preferences: Preferences | None) -> bool:
    del preferences
    return slot.start.hour < 8 or slot.start.hour > 19


def is_prime_hour(slot: AvailableSlot, preferences: Preferences | None) -> bool:
    del preferences
    return 9 <= slot.start.hour < 12 or 16 <= slot.start.hour < 19


SCORING_RULES = (
    ScoringRule('Profesional preferido', 30, is_preferred_professional),
    ScoringRule('Dentro de horario preferido', 20, is_within_preferred_hours),
    ScoringRule('Horario no ideal', -10, is_extreme_hour),
    ScoringRule('Horario óptimo', 10, is_prime_hour),
)


def score_slot(
    slot: AvailableSlot,
    preferences: Preferences | None = None,
    rules: tuple[ScoringRule, ...] = SCORING_RULES,
) -> tuple[int, str]:
    """Return ``(score, reason)`` for a slot.

    Without a preferences block every slot gets the base score. Otherwise the
    rules are evaluated in order and independently of each other; the total
    is clamped to [0, 100] only after every rule has been applied.
    """
    if preferences is None:
        return BASE_SCORE, DEFAULT_REASON

    score = BASE_SCORE
    reasons: list[str] = []

    for rule in rules:
        if rule.applies(slot, preferences):
            score += rule.points
            reasons.append(rule.label)

    return max(MIN_SCORE, min(MAX_SCORE, score)), ', '.join(reasons) or DEFAULT_REASON
