"""
Visibility-scoped lookups for assessments

Ownership and publication filters are part of the lookup itself, so "does not
exist" and "exists but is not visible to this caller" collapse into a single
NotVisible outcome. Each route decides which status code that maps to.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models import Assessment, AssessmentQuestion, AssessmentSession

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    entity: T


@dataclass(frozen=True)
class NotVisible:
    reason: str = "not found"


LookupResult = Union[Found[T], NotVisible]


def _result(entity: Optional[T], reason: str) -> "LookupResult[T]":
    return Found(entity) if entity is not None else NotVisible(reason)


def find_owned_assessment(db: Session, assessment_id: str, owner_id: str) -> "LookupResult[Assessment]":
    """Assessment created by owner_id"""
    assessment = (
        db.query(Assessment)
        .filter(Assessment.id == assessment_id, Assessment.created_by_id == owner_id)
        .first()
    )
    return _result(assessment, "not found or not owned")


def find_published_assessment(db: Session, assessment_id: str) -> "LookupResult[Assessment]":
    """Assessment visible to students"""
    assessment = (
        db.query(Assessment)
        .filter(Assessment.id == assessment_id, Assessment.is_published == True)
        .first()
    )
    return _result(assessment, "not found or not published")


def find_question(db: Session, assessment_id: str, question_id: str) -> "LookupResult[AssessmentQuestion]":
    question = (
        db.query(AssessmentQuestion)
        .filter(AssessmentQuestion.id == question_id, AssessmentQuestion.assessment_id == assessment_id)
        .first()
    )
    return _result(question, "question not found")


def find_session(db: Session, assessment_id: str, session_id: str) -> "LookupResult[AssessmentSession]":
    session = (
        db.query(AssessmentSession)
        .filter(AssessmentSession.id == session_id, AssessmentSession.assessment_id == assessment_id)
        .first()
    )
    return _result(session, "session not found")


def unwrap_or_404(result: "LookupResult[T]", detail: str) -> T:
    """Return the entity or raise 404 with the given message"""
    if isinstance(result, Found):
        return result.entity
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
