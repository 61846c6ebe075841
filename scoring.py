"""
Scoring of photo-proof submissions.

match_labels compares what the labeler detected against the labels a task
expects and turns the matching confidences into a 0-100 score;
decide_initial_status maps that result onto the status a new submission
starts in. Both are pure functions.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Sequence

from models import SubmissionStatus

APPROVAL_THRESHOLD = 60


class Annotation(NamedTuple):
    """A single (label, confidence) pair produced by a labeler."""
    label: str
    confidence: float


@dataclass(frozen=True)
class MatchResult:
    labels: List[str] = field(default_factory=list)
    matched_labels: List[str] = field(default_factory=list)
    ai_score: int = 0

    @property
    def matched(self) -> bool:
        return bool(self.matched_labels)


def normalize_label(label) -> str:
    return str(label).strip().lower()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def match_labels(detected: Iterable[Annotation], expected_labels: Sequence[str]) -> MatchResult:
    """
    Scores detected annotations against a task's expected labels.

    Labels are compared case-insensitively. The score is the mean confidence
    of the matched annotations as a rounded percentage, or 0 when nothing
    matched. `labels` keeps every detected label in labeler order.
    """
    expected = {normalize_label(label) for label in expected_labels or []}
    annotations = [Annotation(str(a[0]), float(a[1])) for a in detected]

    matched = [a for a in annotations if normalize_label(a.label) in expected]

    ai_score = 0
    if matched:
        mean_confidence = sum(a.confidence for a in matched) / len(matched)
        ai_score = min(100, max(0, round_half_up(mean_confidence * 100)))

    return MatchResult(
        labels=[a.label for a in annotations],
        matched_labels=[a.label for a in matched],
        ai_score=ai_score,
    )


def decide_initial_status(matched: bool, ai_score: int) -> SubmissionStatus:
    """Auto-approves confident matches; everything else waits for an admin."""
    if matched and ai_score >= APPROVAL_THRESHOLD:
        return SubmissionStatus.APPROVED
    return SubmissionStatus.PENDING
