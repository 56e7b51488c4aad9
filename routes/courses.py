"""
Course Progress Service Router
Student dashboard, per-course completion and chapter progress updates
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from models import Chapter
from schemas.api_models import ChapterProgressRequest
from utils.auth_dependencies import Caller, get_current_caller
from utils.error_handling import transaction, validate_resource_exists
from utils.progress import get_dashboard_courses, get_progress, upsert_chapter_progress

router = APIRouter()


@router.get("/dashboard/courses", summary="Purchased courses split by completion")
def dashboard_courses(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    return get_dashboard_courses(db, caller.id)


@router.get("/courses/{course_id}/progress", summary="Completion percentage of a course")
def course_progress(course_id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    return {"courseId": course_id, "progress": get_progress(db, caller.id, course_id)}


@router.put("/courses/{course_id}/chapters/{chapter_id}/progress", summary="Mark a chapter complete or incomplete")
def update_chapter_progress(
    course_id: str,
    chapter_id: str,
    payload: ChapterProgressRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Create or update the caller's single progress row for the chapter"""
    chapter = db.query(Chapter).filter(Chapter.id == chapter_id, Chapter.course_id == course_id).first()
    validate_resource_exists(chapter, "Chapter", chapter_id)

    with transaction(db, "update chapter progress"):
        progress = upsert_chapter_progress(db, caller.id, chapter_id, payload.isCompleted)
    db.refresh(progress)

    return {
        "id": progress.id,
        "userId": progress.user_id,
        "chapterId": progress.chapter_id,
        "isCompleted": progress.is_completed,
        "createdAt": progress.created_at,
        "updatedAt": progress.updated_at,
    }
