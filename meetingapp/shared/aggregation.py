"""
Presentation-side aggregation over small in-memory lists:
participant ordering, registration grouping and meeting metrics.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..models import TRAINING_LEVELS, Meeting, Participant, Training, TrainingRegistration, utcnow

PARTICIPANT_SORT_KEYS = ("name", "points", "join_time")
DEFAULT_PARTICIPANT_SORT = "points"


def sort_participants(participants: Iterable[Participant], sort_by: str = DEFAULT_PARTICIPANT_SORT) -> list:
    """
    Order participants for display.

    name: case-insensitive lexicographic
    points: speaking_count descending (ties keep join order)
    join_time: earliest first
    """
    items = list(participants)
    if sort_by == "name":
        return sorted(items, key=lambda p: (p.name or "").casefold())
    if sort_by == "join_time":
        return sorted(items, key=lambda p: p.join_time)
    if sort_by == "points":
        return sorted(items, key=lambda p: p.speaking_count or 0, reverse=True)
    raise ValueError(f"Unknown sort key: {sort_by}")


def group_registrations_by_level(registrations: Iterable[TrainingRegistration]) -> dict[str, list]:
    """Partition registrations by training level; unlevelled ones count as beginner"""
    groups = {level: [] for level in TRAINING_LEVELS}
    for registration in registrations:
        level = registration.training_level if registration.training_level in groups else "beginner"
        groups[level].append(registration)
    return groups


def present_registrations(training: Training, registrations: Sequence[TrainingRegistration]) -> dict:
    """Grouped by level once the training is completed, a flat list before that"""
    if training.status == "completed":
        return {"grouped": True, "groups": group_registrations_by_level(registrations), "registrations": []}
    return {"grouped": False, "groups": {}, "registrations": list(registrations)}


def meeting_duration_minutes(meeting: Meeting, now: Optional[datetime] = None) -> int:
    """Whole minutes since start (or between start and end for an ended meeting)"""
    end = meeting.end_time if meeting.status == "ended" and meeting.end_time else (now or utcnow())
    seconds = (end - meeting.start_time).total_seconds()
    return max(0, int(seconds // 60))


def participation_metrics(
    participants: Sequence[Participant], meeting: Meeting, now: Optional[datetime] = None
) -> dict:
    """Totals shown on the meeting dashboard"""
    return {
        "total_participants": len(participants),
        "active_speakers": sum(1 for p in participants if (p.speaking_count or 0) > 0),
        "total_speaking_points": sum(p.speaking_count or 0 for p in participants),
        "duration_minutes": meeting_duration_minutes(meeting, now),
    }


def training_overview(trainings: Sequence[Training], registration_counts: dict[str, int]) -> dict:
    """Counts shown above the trainings list"""
    return {
        "total_trainings": len(trainings),
        "active_count": sum(1 for t in trainings if t.status == "active"),
        "completed_count": sum(1 for t in trainings if t.status == "completed"),
        "total_participants": sum(registration_counts.get(t.id, 0) for t in trainings),
        "participant_counts": {t.id: registration_counts.get(t.id, 0) for t in trainings},
    }
