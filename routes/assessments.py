"""
Assessment Service Router
Authoring, publication, AI-assisted generation, question management and
results export for assessments
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import (
    AssessmentCreateRequest,
    AssessmentGenerateRequest,
    AssessmentTypeName,
    PublishToggleRequest,
    QuestionCreateRequest,
    QuestionUpdateRequest,
    ResultsPublishToggleRequest,
)
from utils import assessment_manager
from utils.assessment_generator import generate_assessment_content
from utils.auth_dependencies import Caller, get_current_caller, instructor_only
from utils.error_handling import UpstreamServiceError
from utils.lookups import (
    find_owned_assessment,
    find_published_assessment,
    find_question,
    unwrap_or_404,
)
from utils.results_export import export_filename, export_results_csv
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("routes.assessments")

router = APIRouter()


@router.get("", summary="List assessments")
def list_assessments(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    """Instructors get their own assessments, students every published one, newest first"""
    assessments = assessment_manager.list_assessments(db, caller.id, caller.is_instructor)
    return [assessment_manager.serialize_assessment(assessment) for assessment in assessments]


@router.post("", summary="Create an assessment")
def create_assessment(
    payload: AssessmentCreateRequest,
    caller: Caller = Depends(instructor_only("create assessments")),
    db: Session = Depends(get_db),
):
    """
    ## Create Assessment

    Stores the assessment and, when `aiGenerated` is set and `aiContent.questions`
    is supplied, its questions in the same transaction. MCQ questions are worth
    the difficulty level (EASY=1, MEDIUM=2, HARD=3), other types one more.
    """
    if not payload.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")

    assessment = assessment_manager.create_assessment(db, caller.id, payload)
    return assessment_manager.serialize_assessment(assessment, include_questions=True)


@router.post("/generate", summary="Generate assessment questions with AI")
def generate_assessment(
    payload: AssessmentGenerateRequest,
    caller: Caller = Depends(instructor_only("generate assessments")),
):
    """
    Ask the language model for questions on a topic. The reply is not stored;
    the client passes it back as `aiContent` when creating the assessment.
    Unparseable model output fails the request with the raw text in the message.
    """
    if not payload.topic:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Topic is required")

    try:
        generated = generate_assessment_content(
            topic=payload.topic,
            description=payload.description,
            assessment_type=payload.assessmentType,
            question_formats=payload.questionFormat,
            difficulty=payload.difficultyLevel,
        )
    except UpstreamServiceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    logger.info(
        "Assessment questions generated",
        category=LogCategory.AI,
        user_id=caller.id,
        extra={"questions": len(generated.questions)},
    )
    return generated.model_dump(exclude_none=True)


@router.get("/published", summary="List published assessments")
def list_published_assessments(
    type: Optional[AssessmentTypeName] = Query(None, description="Restrict to one assessment type"),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return assessment_manager.list_published_assessments(db, type.value if type else None)


@router.get("/{assessment_id}", summary="Get an assessment")
def get_assessment(assessment_id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    """Instructors may read their own assessments, students only published ones"""
    if caller.is_instructor:
        result = find_owned_assessment(db, assessment_id, caller.id)
    else:
        result = find_published_assessment(db, assessment_id)
    assessment = unwrap_or_404(result, "Assessment not found")
    return assessment_manager.serialize_assessment(assessment, include_questions=True)


@router.patch("/{assessment_id}", summary="Publish or unpublish an assessment")
def update_assessment(
    assessment_id: str,
    payload: PublishToggleRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    assessment = unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    assessment = assessment_manager.set_published(db, assessment, payload.isPublished)
    return assessment_manager.serialize_assessment(assessment)


@router.delete("/{assessment_id}", summary="Delete an assessment")
def delete_assessment(assessment_id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    assessment = unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    payload = assessment_manager.serialize_assessment(assessment)
    assessment_manager.delete_assessment(db, assessment)
    return payload


@router.patch("/{assessment_id}/publish-results", summary="Publish or hide results")
def publish_results(
    assessment_id: str,
    payload: ResultsPublishToggleRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    assessment = unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    assessment = assessment_manager.set_results_published(db, assessment, payload.resultsPublished)
    return assessment_manager.serialize_assessment(assessment)


@router.get("/{assessment_id}/export-results", summary="Export results as CSV")
def export_results(assessment_id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    assessment = unwrap_or_404(
        find_owned_assessment(db, assessment_id, caller.id), "Assessment not found or not authorized"
    )
    content = export_results_csv(db, assessment)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_filename(assessment.title)}"},
    )


# Question management


@router.post("/{assessment_id}/questions", status_code=status.HTTP_201_CREATED, summary="Add a question")
def add_question(
    assessment_id: str,
    payload: QuestionCreateRequest,
    caller: Caller = Depends(instructor_only("add assessment questions")),
    db: Session = Depends(get_db),
):
    assessment = unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    question = assessment_manager.add_question(db, assessment, payload)
    return assessment_manager.serialize_question(question)


@router.get("/{assessment_id}/questions/{question_id}", summary="Get a question")
def get_question(
    assessment_id: str,
    question_id: str,
    caller: Caller = Depends(instructor_only("view assessment questions")),
    db: Session = Depends(get_db),
):
    unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    question = unwrap_or_404(find_question(db, assessment_id, question_id), "Question not found")
    return assessment_manager.serialize_question(question)


@router.patch("/{assessment_id}/questions/{question_id}", summary="Update a question")
def update_question(
    assessment_id: str,
    question_id: str,
    payload: QuestionUpdateRequest,
    caller: Caller = Depends(instructor_only("modify assessment questions")),
    db: Session = Depends(get_db),
):
    unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    question = unwrap_or_404(find_question(db, assessment_id, question_id), "Question not found")
    question = assessment_manager.update_question(db, question, payload)
    return assessment_manager.serialize_question(question)


@router.delete(
    "/{assessment_id}/questions/{question_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a question",
)
def delete_question(
    assessment_id: str,
    question_id: str,
    caller: Caller = Depends(instructor_only("delete assessment questions")),
    db: Session = Depends(get_db),
):
    unwrap_or_404(find_owned_assessment(db, assessment_id, caller.id), "Assessment not found")
    question = unwrap_or_404(find_question(db, assessment_id, question_id), "Question not found")
    assessment_manager.delete_question(db, question)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
