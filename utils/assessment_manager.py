"""
Assessment lifecycle: creation (optionally seeded with AI-generated
questions), listing, publication flags, deletion and question management.

Functions here work on rows already resolved by utils.lookups; ownership and
role checks happen in the routes.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from models import Assessment, AssessmentQuestion, AssessmentType, QuestionType
from schemas.api_models import AssessmentCreateRequest, QuestionCreateRequest, QuestionUpdateRequest
from utils.assessment_analytics import difficulty_value
from utils.error_handling import transaction
from utils.structured_logging import get_logger, log_assessment_event, LogCategory

logger = get_logger("assessment_manager")

OPEN_ENDED_TYPES = ("PRACTICAL", "VIVA", "PEN_PAPER")


def question_marks(question_type: str, difficulty: int) -> int:
    """MCQ questions are worth the difficulty level, everything else one more"""
    return difficulty if question_type == "MCQ" else difficulty + 1


def normalize_question_format(question_format) -> List[str]:
    if isinstance(question_format, list):
        return question_format
    if question_format:
        return [question_format]
    return []


def serialize_question(question: AssessmentQuestion) -> Dict[str, Any]:
    return {
        "id": question.id,
        "assessmentId": question.assessment_id,
        "position": question.position,
        "questionType": question.question_type.value,
        "question": question.question,
        "options": question.options,
        "correctAnswer": question.correct_answer,
        "marks": question.marks,
        "difficultyLevel": question.difficulty_level,
        "createdAt": question.created_at,
        "updatedAt": question.updated_at,
    }


def serialize_assessment(assessment: Assessment, include_questions: bool = False) -> Dict[str, Any]:
    data = {
        "id": assessment.id,
        "title": assessment.title,
        "description": assessment.description,
        "assessmentType": assessment.assessment_type.value,
        "questionFormat": assessment.question_format or [],
        "inclusivityMode": assessment.inclusivity_mode,
        "difficultyLevel": assessment.difficulty_level,
        "isPublished": assessment.is_published,
        "resultsPublished": assessment.results_published,
        "createdById": assessment.created_by_id,
        "courseId": assessment.course_id,
        "createdAt": assessment.created_at,
        "updatedAt": assessment.updated_at,
    }
    if include_questions:
        data["questions"] = [serialize_question(question) for question in assessment.questions]
    return data


def build_ai_questions(questions: List[Dict[str, Any]], difficulty: int) -> List[AssessmentQuestion]:
    """
    Turn generated question dicts into rows. Unknown question types and
    entries without question text are skipped.
    """
    rows = []
    for item in questions:
        question_type = item.get("type")
        text = item.get("question")

        if question_type == "MCQ":
            options = item.get("options")
            correct_answer = item.get("correctAnswer")
        elif question_type == "DESCRIPTIVE":
            options = None
            correct_answer = item.get("sampleAnswer")
        elif question_type in OPEN_ENDED_TYPES:
            options = None
            correct_answer = item.get("sampleAnswer") or item.get("correctAnswer") or ""
        else:
            logger.warning(
                "Skipping generated question of unknown type",
                category=LogCategory.ASSESSMENT,
                extra={"type": question_type},
            )
            continue

        if not text:
            logger.warning("Skipping generated question without text", category=LogCategory.ASSESSMENT)
            continue

        rows.append(
            AssessmentQuestion(
                position=len(rows),
                question_type=QuestionType(question_type),
                question=text,
                options=options,
                correct_answer=correct_answer,
                marks=question_marks(question_type, difficulty),
                difficulty_level=difficulty,
            )
        )
    return rows


def create_assessment(db: Session, creator_id: str, payload: AssessmentCreateRequest) -> Assessment:
    """
    Create an assessment and, for AI-generated ones, its questions in a single
    transaction. The caller has already checked the title and the role.
    """
    difficulty = difficulty_value(payload.difficultyLevel)

    assessment = Assessment(
        created_by_id=creator_id,
        course_id=payload.courseId,
        title=payload.title,
        description=payload.description,
        assessment_type=AssessmentType(payload.assessmentType.value),
        question_format=normalize_question_format(payload.questionFormat),
        inclusivity_mode=bool(payload.inclusivityMode),
        difficulty_level=difficulty,
    )

    with transaction(db, "create assessment"):
        db.add(assessment)
        if payload.aiGenerated and payload.aiContent and payload.aiContent.questions:
            assessment.questions = build_ai_questions(payload.aiContent.questions, difficulty)

    db.refresh(assessment)
    log_assessment_event(
        "Assessment created", assessment.id, user_id=creator_id, questions=len(assessment.questions)
    )
    return assessment


def list_assessments(db: Session, caller_id: str, is_instructor: bool) -> List[Assessment]:
    """Instructors see their own assessments, students every published one; newest first"""
    query = db.query(Assessment)
    if is_instructor:
        query = query.filter(Assessment.created_by_id == caller_id)
    else:
        query = query.filter(Assessment.is_published == True)
    return query.order_by(Assessment.created_at.desc()).all()


def list_published_assessments(db: Session, assessment_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """Published assessments, most recently updated first, optionally of one type"""
    query = (
        db.query(Assessment)
        .options(selectinload(Assessment.questions))
        .filter(Assessment.is_published == True)
    )
    if assessment_type:
        query = query.filter(Assessment.assessment_type == AssessmentType(assessment_type))

    assessments = query.order_by(Assessment.updated_at.desc()).all()
    logger.debug(
        "Published assessments listed",
        category=LogCategory.ASSESSMENT,
        extra={"type": assessment_type, "count": len(assessments)},
    )

    return [
        {
            "id": assessment.id,
            "title": assessment.title,
            "description": assessment.description,
            "assessmentType": assessment.assessment_type.value,
            "questionFormat": assessment.question_format or [],
            "difficultyLevel": assessment.difficulty_level,
            "isPublished": assessment.is_published,
            "createdAt": assessment.created_at,
            "updatedAt": assessment.updated_at,
            "questions": [{"id": question.id} for question in assessment.questions],
            "questionCount": len(assessment.questions),
        }
        for assessment in assessments
    ]


def set_published(db: Session, assessment: Assessment, is_published: bool) -> Assessment:
    with transaction(db, "update assessment"):
        assessment.is_published = is_published
    db.refresh(assessment)
    log_assessment_event("Publication changed", assessment.id, is_published=is_published)
    return assessment


def set_results_published(db: Session, assessment: Assessment, results_published: bool) -> Assessment:
    with transaction(db, "publish results"):
        assessment.results_published = results_published
    db.refresh(assessment)
    log_assessment_event("Results publication changed", assessment.id, results_published=results_published)
    return assessment


def delete_assessment(db: Session, assessment: Assessment) -> None:
    """Delete an assessment; questions, sessions and responses go with it"""
    assessment_id = assessment.id
    with transaction(db, "delete assessment"):
        db.delete(assessment)
    log_assessment_event("Assessment deleted", assessment_id)


def add_question(db: Session, assessment: Assessment, payload: QuestionCreateRequest) -> AssessmentQuestion:
    """Append a question; marks default by the same rule as generated questions"""
    difficulty = (
        difficulty_value(payload.difficultyLevel.value)
        if payload.difficultyLevel
        else assessment.difficulty_level or 2
    )
    question_type = payload.questionType.value
    next_position = max((question.position for question in assessment.questions), default=-1) + 1

    question = AssessmentQuestion(
        assessment_id=assessment.id,
        position=next_position,
        question_type=QuestionType(question_type),
        question=payload.question,
        options=payload.options,
        correct_answer=payload.correctAnswer,
        marks=payload.marks if payload.marks is not None else question_marks(question_type, difficulty),
        difficulty_level=difficulty,
    )

    with transaction(db, "create question"):
        db.add(question)
    db.refresh(question)
    return question


def update_question(db: Session, question: AssessmentQuestion, payload: QuestionUpdateRequest) -> AssessmentQuestion:
    """Apply only the fields present in the request body"""
    changes = payload.model_dump(exclude_unset=True)
    field_map = {"question": "question", "options": "options", "correctAnswer": "correct_answer", "marks": "marks"}

    with transaction(db, "update question"):
        for key, value in changes.items():
            if value is None and key in ("question", "marks"):
                continue
            setattr(question, field_map[key], value)
    db.refresh(question)
    return question


def delete_question(db: Session, question: AssessmentQuestion) -> None:
    with transaction(db, "delete question"):
        db.delete(question)
