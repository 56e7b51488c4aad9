"""
Course progress for students: per-course completion percentage and the
student dashboard split into completed / in-progress courses.

Both readers swallow data-access failures and return a neutral value so the
pages hosting them always render.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy.orm import Session, joinedload

from models import Chapter, Course, Purchase, UserProgress
from utils.numbers import round_half_up
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("progress")


def get_progress(db: Session, user_id: str, course_id: str) -> int:
    """
    Completion percentage of a course for a student, in [0, 100].

    Only published chapters count in the denominator; a course without
    published chapters is 0% complete.
    """
    try:
        published_chapter_ids = [
            chapter_id
            for (chapter_id,) in db.query(Chapter.id)
            .filter(Chapter.course_id == course_id, Chapter.is_published == True)
            .all()
        ]

        if not published_chapter_ids:
            return 0

        completed = (
            db.query(UserProgress)
            .filter(
                UserProgress.user_id == user_id,
                UserProgress.chapter_id.in_(published_chapter_ids),
                UserProgress.is_completed == True,
            )
            .count()
        )

        return round_half_up(completed / len(published_chapter_ids) * 100)
    except Exception as e:
        logger.error(
            "Error calculating progress",
            category=LogCategory.ANALYTICS,
            exception=e,
            user_id=user_id,
            extra={"course_id": course_id},
        )
        return 0


def serialize_dashboard_course(course: Course, progress: int) -> Dict[str, Any]:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "imageUrl": course.image_url,
        "price": course.price,
        "isPublished": course.is_published,
        "category": {"id": course.category.id, "name": course.category.name} if course.category else None,
        "chapters": [
            {"id": chapter.id, "title": chapter.title, "position": chapter.position}
            for chapter in course.chapters
            if chapter.is_published
        ],
        "progress": progress,
    }


def get_dashboard_courses(db: Session, user_id: str) -> Dict[str, List[Dict[str, Any]]]:
    """Purchased courses of a student split by completion, newest purchase first"""
    try:
        purchases = (
            db.query(Purchase)
            .options(
                joinedload(Purchase.course).joinedload(Course.category),
                joinedload(Purchase.course).joinedload(Course.chapters),
            )
            .filter(Purchase.user_id == user_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )

        courses = [
            serialize_dashboard_course(purchase.course, get_progress(db, user_id, purchase.course.id))
            for purchase in purchases
        ]

        completed_courses = [course for course in courses if course["progress"] == 100]
        courses_in_progress = [course for course in courses if course["progress"] < 100]

        logger.info(
            "Dashboard courses computed",
            category=LogCategory.ANALYTICS,
            user_id=user_id,
            extra={"completed": len(completed_courses), "in_progress": len(courses_in_progress)},
        )

        return {"completedCourses": completed_courses, "coursesInProgress": courses_in_progress}
    except Exception as e:
        logger.error("Error fetching dashboard courses", category=LogCategory.ANALYTICS, exception=e, user_id=user_id)
        return {"completedCourses": [], "coursesInProgress": []}


def upsert_chapter_progress(db: Session, user_id: str, chapter_id: str, is_completed: bool) -> UserProgress:
    """Create or update the single progress row for (student, chapter). Caller commits."""
    progress = (
        db.query(UserProgress)
        .filter(UserProgress.user_id == user_id, UserProgress.chapter_id == chapter_id)
        .first()
    )

    if progress:
        progress.is_completed = is_completed
        progress.updated_at = datetime.utcnow()
    else:
        progress = UserProgress(user_id=user_id, chapter_id=chapter_id, is_completed=is_completed)
        db.add(progress)

    return progress
