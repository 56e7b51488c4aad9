"""
Teacher-facing views of a single student: course progress and assessment
results on the teacher's content, plus a six-month activity trend.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from models import Assessment, AssessmentSession, Chapter, Course, Purchase, UserProgress
from utils.numbers import round_half_up
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("student_performance")

TREND_MONTHS = 6


def list_students(db: Session, teacher_id: str) -> Dict[str, List[Dict[str, Any]]]:
    """Students who bought a course or took an assessment from this teacher"""
    try:
        purchases = (
            db.query(Purchase)
            .join(Purchase.course)
            .filter(Course.user_id == teacher_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )
        sessions = (
            db.query(AssessmentSession)
            .join(AssessmentSession.assessment)
            .filter(Assessment.created_by_id == teacher_id)
            .all()
        )

        students: Dict[str, Dict[str, set]] = {}
        for purchase in purchases:
            students.setdefault(purchase.user_id, {"courses": set(), "assessments": set()})
            students[purchase.user_id]["courses"].add(purchase.course_id)
        for session in sessions:
            students.setdefault(session.user_id, {"courses": set(), "assessments": set()})
            students[session.user_id]["assessments"].add(session.assessment_id)

        return {
            "students": [
                {
                    "id": student_id,
                    "enrolledCourses": len(data["courses"]),
                    "assessmentsTaken": len(data["assessments"]),
                }
                for student_id, data in students.items()
            ]
        }
    except Exception as e:
        logger.error("Error listing students", category=LogCategory.ANALYTICS, exception=e, user_id=teacher_id)
        return {"students": []}


def _course_progress(db: Session, student_id: str, purchase: Purchase) -> Dict[str, Any]:
    chapter_ids = [
        chapter_id
        for (chapter_id,) in db.query(Chapter.id)
        .filter(Chapter.course_id == purchase.course_id, Chapter.is_published == True)
        .all()
    ]

    progress_rows = []
    if chapter_ids:
        progress_rows = (
            db.query(UserProgress)
            .filter(UserProgress.user_id == student_id, UserProgress.chapter_id.in_(chapter_ids))
            .all()
        )

    completed = sum(1 for row in progress_rows if row.is_completed)
    total = len(chapter_ids)
    last_accessed = max((row.updated_at for row in progress_rows), default=None) or purchase.created_at

    return {
        "id": purchase.course_id,
        "title": purchase.course.title,
        "progress": round_half_up(completed / total * 100) if total else 0,
        "chaptersCompleted": completed,
        "totalChapters": total,
        "lastAccessed": last_accessed,
    }


def get_student_performance(db: Session, teacher_id: str, student_id: str) -> Dict[str, List[Dict[str, Any]]]:
    """Snapshot of one student's courses and assessment sessions on this teacher's content"""
    try:
        purchases = (
            db.query(Purchase)
            .join(Purchase.course)
            .options(joinedload(Purchase.course))
            .filter(Purchase.user_id == student_id, Course.user_id == teacher_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )
        sessions = (
            db.query(AssessmentSession)
            .join(AssessmentSession.assessment)
            .options(joinedload(AssessmentSession.assessment))
            .filter(AssessmentSession.user_id == student_id, Assessment.created_by_id == teacher_id)
            .order_by(AssessmentSession.updated_at.desc())
            .all()
        )

        return {
            "courses": [_course_progress(db, student_id, purchase) for purchase in purchases],
            "assessments": [
                {
                    "id": session.assessment_id,
                    "title": session.assessment.title,
                    "score": session.score or 0,
                    "completedAt": session.end_time or session.updated_at,
                    "difficultyLevel": session.assessment.difficulty_level or 2,
                }
                for session in sessions
            ],
        }
    except Exception as e:
        logger.error(
            "Error computing student performance",
            category=LogCategory.ANALYTICS,
            exception=e,
            user_id=teacher_id,
            extra={"student_id": student_id},
        )
        return {"courses": [], "assessments": []}


def month_window(now: datetime, months: int = TREND_MONTHS) -> List[Tuple[int, int]]:
    """(year, month) pairs for the last `months` calendar months, oldest first, ending at now"""
    window = []
    for offset in range(months - 1, -1, -1):
        index = now.year * 12 + (now.month - 1) - offset
        window.append((index // 12, index % 12 + 1))
    return window


def empty_trend(now: datetime) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "enrollmentData": [
            {"month": datetime(year, month, 1).strftime("%b"), "progress": 0, "score": 0}
            for year, month in month_window(now)
        ]
    }


def get_enrollment_trend(
    db: Session, teacher_id: str, student_id: str, now: Optional[datetime] = None
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Six monthly points {month, progress, score}: chapters of the teacher's
    courses completed that month and the month's average assessment score.
    """
    now = now or datetime.utcnow()
    try:
        progress_rows = (
            db.query(UserProgress)
            .join(UserProgress.chapter)
            .join(Chapter.course)
            .filter(UserProgress.user_id == student_id, Course.user_id == teacher_id)
            .order_by(UserProgress.updated_at)
            .all()
        )
        sessions = (
            db.query(AssessmentSession)
            .join(AssessmentSession.assessment)
            .filter(AssessmentSession.user_id == student_id, Assessment.created_by_id == teacher_id)
            .order_by(AssessmentSession.updated_at)
            .all()
        )

        monthly_data = []
        for year, month in month_window(now):
            completed = sum(
                1
                for row in progress_rows
                if row.is_completed and (row.updated_at.year, row.updated_at.month) == (year, month)
            )
            scores = [
                session.score or 0
                for session in sessions
                if (session.updated_at.year, session.updated_at.month) == (year, month)
            ]
            monthly_data.append(
                {
                    "month": datetime(year, month, 1).strftime("%b"),
                    "progress": completed,
                    "score": round_half_up(sum(scores) / len(scores)) if scores else 0,
                }
            )

        return {"enrollmentData": monthly_data}
    except Exception as e:
        logger.error(
            "Error computing enrollment trend",
            category=LogCategory.ANALYTICS,
            exception=e,
            user_id=teacher_id,
            extra={"student_id": student_id},
        )
        return empty_trend(now)
