"""
Teacher Analytics Service Router
Revenue, assessment performance and per-student views for instructors.
Every endpoint answers with a complete shape, zeroed when data access fails.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from utils.assessment_analytics import get_assessment_analytics
from utils.auth_dependencies import Caller, instructor_only
from utils.student_performance import get_enrollment_trend, get_student_performance, list_students
from utils.teacher_analytics import get_analytics

router = APIRouter()

require_analytics_access = instructor_only("view analytics")


@router.get("", summary="Revenue and sales analytics")
def teacher_analytics(caller: Caller = Depends(require_analytics_access), db: Session = Depends(get_db)):
    """
    Revenue grouped by course, total and current-month sales, distinct buyers,
    the top earning course and the five most recent sales.
    """
    return get_analytics(db, caller.id)


@router.get("/assessments", summary="Assessment performance analytics")
def assessment_analytics(caller: Caller = Depends(require_analytics_access), db: Session = Depends(get_db)):
    return get_assessment_analytics(db, caller.id)


@router.get("/students", summary="Students of the caller's courses and assessments")
def students(caller: Caller = Depends(require_analytics_access), db: Session = Depends(get_db)):
    return list_students(db, caller.id)


@router.get("/students/{student_id}/performance", summary="One student's progress and results")
def student_performance(
    student_id: str, caller: Caller = Depends(require_analytics_access), db: Session = Depends(get_db)
):
    return get_student_performance(db, caller.id, student_id)


@router.get("/students/{student_id}/enrollment", summary="One student's six-month activity trend")
def student_enrollment(
    student_id: str, caller: Caller = Depends(require_analytics_access), db: Session = Depends(get_db)
):
    return get_enrollment_trend(db, caller.id, student_id)
