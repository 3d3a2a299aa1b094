"""
Study-day allocator.

Spreads the available study days between today and the test date across the
student's topics, proportionally to a fixed difficulty weight. Pure and
deterministic: no I/O, no shared state.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Sequence


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


DIFFICULTY_WEIGHTS = MappingProxyType({
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 1.5,
    Difficulty.HARD: 2,
})

# Heaviest first
PRIORITY_ORDER = (Difficulty.HARD, Difficulty.MEDIUM, Difficulty.EASY)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class ScheduleError(ValueError):
    """Base class for allocation input errors."""


class InvalidScheduleWindow(ScheduleError):
    pass


class NoAvailableStudyDays(ScheduleError):
    pass


@dataclass(frozen=True)
class Topic:
    name: str
    difficulty: Difficulty


@dataclass(frozen=True)
class TopicSchedule:
    topic: str
    dates: tuple[date, ...]

    def date_strings(self) -> list[str]:
        return [d.isoformat() for d in self.dates]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def working_study_dates(
    today: date,
    test_date: date,
    available_study_days: Iterable[str],
) -> list[date]:
    """Every date in [today, test_date] whose weekday is in available_study_days.

    Raises InvalidScheduleWindow when test_date is not at least one day after
    today, NoAvailableStudyDays when the weekday filter leaves nothing.
    """
    total_days = (test_date - today).days
    if total_days < 1:
        raise InvalidScheduleWindow("Test date must be in the future.")

    wanted = {name.strip().lower() for name in available_study_days}
    dates = [
        today + timedelta(days=i)
        for i in range(total_days + 1)
        if WEEKDAY_NAMES[(today + timedelta(days=i)).weekday()].lower() in wanted
    ]
    if not dates:
        raise NoAvailableStudyDays("No available study days found between now and the test date.")
    return dates


def allocate_study_days(
    today: date,
    test_date: date,
    available_study_days: Iterable[str],
    topics: Sequence[Topic],
) -> list[TopicSchedule]:
    """Assign every working study date to exactly one topic.

    Hard topics claim first, then Medium, then Easy; inside a group the input
    order is kept. Each topic takes round(days_per_weight * weight) dates off
    the front of what is left. The rounding remainder is appended to the last
    topic that got dates; if no topic got any, the first input topic takes
    them all.
    """
    study_dates = working_study_dates(today, test_date, available_study_days)
    return split_study_dates(study_dates, topics)


def split_study_dates(study_dates: Sequence[date], topics: Sequence[Topic]) -> list[TopicSchedule]:
    """Share already-validated working dates between topics (see allocate_study_days)."""
    if not topics:
        return []

    study_dates = list(study_dates)
    groups = {d: [t for t in topics if Difficulty(t.difficulty) == d] for d in PRIORITY_ORDER}
    total_weight = sum(len(groups[d]) * DIFFICULTY_WEIGHTS[d] for d in PRIORITY_ORDER)
    days_per_weight = len(study_dates) / total_weight

    claimed: list[tuple[str, list[date]]] = []
    cursor = 0
    for difficulty in PRIORITY_ORDER:
        weight = DIFFICULTY_WEIGHTS[difficulty]
        for topic in groups[difficulty]:
            end = cursor + _round_half_up(days_per_weight * weight)
            topic_dates = study_dates[cursor:end]
            if topic_dates:
                claimed.append((topic.name, topic_dates))
            cursor = end

    if cursor < len(study_dates):
        if claimed:
            claimed[-1][1].extend(study_dates[cursor:])
        else:
            claimed.append((topics[0].name, list(study_dates)))

    return [TopicSchedule(topic=name, dates=tuple(dates)) for name, dates in claimed]
