"""
Submission and scoring pipeline

Students submit one answer set per attempt; each attempt becomes a COMPLETED
session whose responses start ungraded. Instructors list sessions, grade
responses by hand or auto-grade MCQ answers, and students read their result
once the instructor publishes results.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session, selectinload

from config import settings
from models import (
    Assessment,
    AssessmentQuestion,
    AssessmentResponse,
    AssessmentSession,
    QuestionType,
    SessionStatus,
)
from schemas.api_models import AnswerItem, GradeRequest
from utils.error_handling import transaction
from utils.structured_logging import log_assessment_event, LogCategory

CORRECT_ANSWER_FALLBACK = "Not available"


def parse_answers(raw_answers: Any) -> List[AnswerItem]:
    """
    Validate the submitted answers payload

    Raises:
        HTTPException: 400 when answers are missing, not a list, or malformed
    """
    if raw_answers is None or not isinstance(raw_answers, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid answers data")
    try:
        return [AnswerItem.model_validate(item) for item in raw_answers]
    except SchemaValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid answers data")


def completion_score(session: AssessmentSession) -> int:
    """Sum of marks of every question with a response in the session, answered or blank"""
    return sum(response.question.marks or 0 for response in session.responses if response.question is not None)


def graded_score(session: AssessmentSession) -> float:
    """Sum of response scores; ungraded responses contribute 0"""
    return sum(response.score for response in session.responses if response.score is not None)


def serialize_response(response: AssessmentResponse) -> Dict[str, Any]:
    question = response.question
    return {
        "id": response.id,
        "questionId": response.question_id,
        "answer": response.answer,
        "isCorrect": response.is_correct,
        "score": response.score,
        "aiEvaluation": response.ai_evaluation,
        "question": {
            "id": question.id,
            "question": question.question,
            "questionType": question.question_type.value,
            "options": question.options,
            "correctAnswer": question.correct_answer,
            "marks": question.marks,
        }
        if question is not None
        else None,
    }


def serialize_session(session: AssessmentSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "assessmentId": session.assessment_id,
        "userId": session.user_id,
        "status": session.status.value,
        "startTime": session.start_time,
        "endTime": session.end_time,
        "score": session.score,
        "feedback": session.feedback,
        "createdAt": session.created_at,
        "updatedAt": session.updated_at,
        "completionScore": completion_score(session),
        "gradedScore": graded_score(session),
        "responses": [serialize_response(response) for response in session.responses],
    }


def submit_responses(db: Session, assessment: Assessment, user_id: str, raw_answers: Any) -> Dict[str, Any]:
    """
    Record one attempt: a COMPLETED session plus one ungraded response per
    answer, written in a single transaction. Question ids are stored as given.
    """
    answers = parse_answers(raw_answers)

    if not settings.ALLOW_RESUBMISSION:
        previous = (
            db.query(AssessmentSession.id)
            .filter(AssessmentSession.assessment_id == assessment.id, AssessmentSession.user_id == user_id)
            .first()
        )
        if previous:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Assessment already submitted")

    now = datetime.utcnow()
    session = AssessmentSession(
        assessment_id=assessment.id,
        user_id=user_id,
        status=SessionStatus.COMPLETED,
        start_time=now,
        end_time=now,
        score=0,
    )

    with transaction(db, "submit assessment responses"):
        db.add(session)
        session.responses = [
            AssessmentResponse(
                question_id=item.questionId,
                answer=item.answer or None,
                is_correct=None,
                score=None,
                ai_evaluation=None,
            )
            for item in answers
        ]

    log_assessment_event(
        "Assessment submitted", assessment.id, user_id=user_id, session_id=session.id, answers=len(answers)
    )
    return {"success": True, "sessionId": session.id}


def list_sessions(db: Session, assessment: Assessment) -> List[Dict[str, Any]]:
    """Every session of an assessment with responses and questions, latest end time first"""
    sessions = (
        db.query(AssessmentSession)
        .options(selectinload(AssessmentSession.responses).selectinload(AssessmentResponse.question))
        .filter(AssessmentSession.assessment_id == assessment.id)
        .order_by(AssessmentSession.end_time.desc())
        .all()
    )
    return [serialize_session(session) for session in sessions]


def _backfill_correct_answers(db: Session, payload: Dict[str, Any]) -> None:
    responses = [response for response in payload["responses"] if response["question"] is not None]
    if not any(not response["question"]["correctAnswer"] for response in responses):
        return

    question_ids = [response["questionId"] for response in responses]
    correct_answers = dict(
        db.query(AssessmentQuestion.id, AssessmentQuestion.correct_answer)
        .filter(AssessmentQuestion.id.in_(question_ids))
        .all()
    )
    for response in responses:
        question = response["question"]
        question["correctAnswer"] = (
            correct_answers.get(response["questionId"]) or question["correctAnswer"] or CORRECT_ANSWER_FALLBACK
        )


def get_student_result(db: Session, assessment_id: str, user_id: str) -> Dict[str, Any]:
    """
    The caller's latest session for an assessment, visible only once the
    assessment and its results are both published.
    """
    session = (
        db.query(AssessmentSession)
        .options(
            selectinload(AssessmentSession.assessment),
            selectinload(AssessmentSession.responses).selectinload(AssessmentResponse.question),
        )
        .filter(AssessmentSession.assessment_id == assessment_id, AssessmentSession.user_id == user_id)
        .order_by(AssessmentSession.created_at.desc())
        .first()
    )

    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You have not taken this assessment")

    assessment = session.assessment
    if not assessment.is_published or not assessment.results_published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Results have not been published yet")

    payload = serialize_session(session)
    payload["assessment"] = {
        "title": assessment.title,
        "isPublished": assessment.is_published,
        "resultsPublished": assessment.results_published,
    }
    _backfill_correct_answers(db, payload)
    return payload


def _load_session(db: Session, session: AssessmentSession) -> AssessmentSession:
    return (
        db.query(AssessmentSession)
        .options(selectinload(AssessmentSession.responses).selectinload(AssessmentResponse.question))
        .filter(AssessmentSession.id == session.id)
        .one()
    )


def grade_session(db: Session, session: AssessmentSession, payload: GradeRequest) -> Dict[str, Any]:
    """Apply manual grades and recompute the session score from response scores"""
    session = _load_session(db, session)
    responses_by_id = {response.id: response for response in session.responses}

    unknown = [grade.responseId for grade in payload.grades if grade.responseId not in responses_by_id]
    if unknown:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Response not found: {unknown[0]}")

    with transaction(db, "grade session"):
        for grade in payload.grades:
            response = responses_by_id[grade.responseId]
            response.score = grade.score
            response.is_correct = grade.isCorrect
        if payload.feedback is not None:
            session.feedback = payload.feedback
        session.score = graded_score(session)

    log_assessment_event(
        "Session graded", session.assessment_id, session_id=session.id, category=LogCategory.GRADING, score=session.score
    )
    return serialize_session(_load_session(db, session))


def is_correct_choice(answer: Optional[str], correct_answer: Optional[str]) -> bool:
    return answer is not None and correct_answer is not None and answer == correct_answer


def auto_grade_session(db: Session, session: AssessmentSession) -> Dict[str, Any]:
    """Grade MCQ responses by exact match (full marks or 0) and recompute the score"""
    session = _load_session(db, session)

    with transaction(db, "auto-grade session"):
        for response in session.responses:
            question = response.question
            if question is None or question.question_type != QuestionType.MCQ:
                continue
            correct = is_correct_choice(response.answer, question.correct_answer)
            response.is_correct = correct
            response.score = float(question.marks or 0) if correct else 0.0
        session.score = graded_score(session)

    log_assessment_event(
        "Session auto-graded", session.assessment_id, session_id=session.id, category=LogCategory.GRADING, score=session.score
    )
    return serialize_session(_load_session(db, session))
