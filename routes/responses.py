"""
Submission Service Router
Student submissions, instructor session listing and grading, student result view
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import GradeRequest, SubmissionRequest, SubmissionResponse
from utils import scoring
from utils.auth_dependencies import Caller, get_current_caller
from utils.lookups import find_owned_assessment, find_published_assessment, find_session, unwrap_or_404

router = APIRouter()


@router.post("/{assessment_id}/responses", response_model=SubmissionResponse, summary="Submit answers")
def submit_responses(
    assessment_id: str,
    payload: Optional[SubmissionRequest] = None,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    ## Submit Assessment Answers

    Records one attempt as a COMPLETED session with one ungraded response per
    answer. The assessment must be published. Whether a second attempt is
    accepted depends on the `ALLOW_RESUBMISSION` setting.
    """
    assessment = unwrap_or_404(
        find_published_assessment(db, assessment_id), "Assessment not found or not published"
    )
    return scoring.submit_responses(db, assessment, caller.id, payload.answers if payload else None)


@router.get("/{assessment_id}/responses", summary="List sessions for grading")
def list_responses(assessment_id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    """All sessions with responses and questions, latest end time first. Creator only."""
    assessment = unwrap_or_404(
        find_owned_assessment(db, assessment_id, caller.id), "Assessment not found or not authorized"
    )
    return scoring.list_sessions(db, assessment)


@router.get("/{assessment_id}/student-results", summary="Get the caller's result")
def student_results(assessment_id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    return scoring.get_student_result(db, assessment_id, caller.id)


@router.patch("/{assessment_id}/sessions/{session_id}/grade", summary="Grade a session")
def grade_session(
    assessment_id: str,
    session_id: str,
    payload: GradeRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found or not authorized")
    session = unwrap_or_404(find_session(db, assessment_id, session_id), "Session not found")
    return scoring.grade_session(db, session, payload)


@router.post("/{assessment_id}/sessions/{session_id}/auto-grade", summary="Auto-grade MCQ responses")
def auto_grade_session(
    assessment_id: str,
    session_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found or not authorized")
    session = unwrap_or_404(find_session(db, assessment_id, session_id), "Session not found")
    return scoring.auto_grade_session(db, session)
