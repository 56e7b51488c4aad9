"""
Assessment performance analytics for a teacher: per-assessment averages,
overall totals and a breakdown by difficulty band.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from models import Assessment, AssessmentSession
from utils.numbers import round_half_up
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("assessment_analytics")

DIFFICULTY_LABELS = {1: "EASY", 2: "MEDIUM", 3: "HARD"}
DIFFICULTY_VALUES = {"EASY": 1, "MEDIUM": 2, "HARD": 3}
DEFAULT_DIFFICULTY = 2
TITLE_MAX_LENGTH = 20


def difficulty_label(level: Optional[int]) -> str:
    """1 -> EASY, 3 -> HARD, anything else (2, None, out of range) -> MEDIUM"""
    return DIFFICULTY_LABELS.get(level, "MEDIUM")


def difficulty_value(label: Optional[str]) -> int:
    """EASY -> 1, HARD -> 3, anything else -> 2"""
    return DIFFICULTY_VALUES.get((label or "").upper(), DEFAULT_DIFFICULTY)


def truncate_title(title: str, limit: int = TITLE_MAX_LENGTH) -> str:
    return f"{title[:limit]}..." if len(title) > limit else title


def average_session_score(sessions: List[AssessmentSession]) -> int:
    """Rounded mean of session scores; unscored sessions count as 0"""
    if not sessions:
        return 0
    return round_half_up(sum(session.score or 0 for session in sessions) / len(sessions))


def empty_difficulty_buckets() -> Dict[str, Dict[str, int]]:
    return {label: {"count": 0, "avgScore": 0} for label in ("EASY", "MEDIUM", "HARD")}


def empty_assessment_analytics() -> Dict[str, Any]:
    return {
        "assessmentData": [],
        "totalAssessments": 0,
        "totalAttempts": 0,
        "avgScore": 0,
        "assessmentsByDifficulty": empty_difficulty_buckets(),
    }


def build_difficulty_buckets(assessments: List[Assessment]) -> Dict[str, Dict[str, int]]:
    """
    Count assessments per difficulty band and blend each assessment's average
    session score into a running band average:

        avg = round((avg * (count - 1) + assessment_avg) / count)

    The result depends on processing order and is not a true per-session mean
    when attempt counts differ; reports produced so far use this exact formula.
    Assessments without sessions increase the count but leave the average as is.
    """
    buckets = empty_difficulty_buckets()

    for assessment in assessments:
        bucket = buckets[difficulty_label(assessment.difficulty_level)]
        bucket["count"] += 1

        if assessment.sessions:
            assessment_avg = average_session_score(assessment.sessions)
            running_total = bucket["avgScore"] * (bucket["count"] - 1)
            bucket["avgScore"] = round_half_up((running_total + assessment_avg) / bucket["count"])

    return buckets


def get_assessment_analytics(db: Session, user_id: str) -> Dict[str, Any]:
    """Analytics over every assessment created by the teacher; never raises"""
    try:
        assessments = (
            db.query(Assessment)
            .options(selectinload(Assessment.sessions))
            .filter(Assessment.created_by_id == user_id)
            .order_by(Assessment.created_at)
            .all()
        )

        assessment_data = [
            {
                "name": truncate_title(assessment.title),
                "score": average_session_score(assessment.sessions),
                "attempts": len(assessment.sessions),
            }
            for assessment in assessments
        ]

        all_scores = [session.score or 0 for assessment in assessments for session in assessment.sessions]
        total_attempts = len(all_scores)
        overall_avg = round_half_up(sum(all_scores) / total_attempts) if total_attempts else 0

        return {
            "assessmentData": assessment_data,
            "totalAssessments": len(assessments),
            "totalAttempts": total_attempts,
            "avgScore": overall_avg,
            "assessmentsByDifficulty": build_difficulty_buckets(assessments),
        }
    except Exception as e:
        logger.error(
            "Error computing assessment analytics", category=LogCategory.ANALYTICS, exception=e, user_id=user_id
        )
        return empty_assessment_analytics()
