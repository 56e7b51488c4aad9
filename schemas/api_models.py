"""
Pydantic schemas for API v1
Request bodies use the camelCase keys the front end sends
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Dict, Any, Union
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class AssessmentTypeName(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    BLENDED = "BLENDED"


class QuestionTypeName(str, Enum):
    MCQ = "MCQ"
    DESCRIPTIVE = "DESCRIPTIVE"
    PRACTICAL = "PRACTICAL"
    VIVA = "VIVA"
    PEN_PAPER = "PEN_PAPER"


class DifficultyName(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


# ============================================================================
# BASE MODELS
# ============================================================================

class BaseResponse(BaseModel):
    """Base response with common fields"""
    success: bool = True
    message: Optional[str] = None


# ============================================================================
# ASSESSMENT MODELS
# ============================================================================

class AIContent(BaseModel):
    """Question list previously returned by the generate endpoint"""
    model_config = ConfigDict(extra="allow")

    questions: List[Dict[str, Any]] = []


class AssessmentCreateRequest(BaseModel):
    # title stays optional so a missing title is reported as 400, not 422
    title: Optional[str] = None
    description: Optional[str] = None
    assessmentType: AssessmentTypeName = AssessmentTypeName.ONLINE
    questionFormat: Union[List[str], str, None] = None
    inclusivityMode: Optional[bool] = False
    courseId: Optional[str] = None
    aiGenerated: bool = False
    aiContent: Optional[AIContent] = None
    difficultyLevel: Optional[str] = None


class AssessmentGenerateRequest(BaseModel):
    topic: Optional[str] = None
    description: Optional[str] = None
    assessmentType: str = "ONLINE"
    questionFormat: Union[List[str], str, None] = None
    difficultyLevel: Optional[str] = None


class PublishToggleRequest(BaseModel):
    isPublished: bool


class ResultsPublishToggleRequest(BaseModel):
    resultsPublished: bool


# ============================================================================
# QUESTION MODELS
# ============================================================================

class QuestionCreateRequest(BaseModel):
    questionType: QuestionTypeName
    question: str = Field(..., min_length=1)
    options: Optional[List[str]] = None
    correctAnswer: Optional[str] = None
    marks: Optional[int] = Field(None, ge=0)
    difficultyLevel: Optional[DifficultyName] = None


class QuestionUpdateRequest(BaseModel):
    question: Optional[str] = Field(None, min_length=1)
    options: Optional[List[str]] = None
    correctAnswer: Optional[str] = None
    marks: Optional[int] = Field(None, ge=0)


# ============================================================================
# SUBMISSION & GRADING MODELS
# ============================================================================

class AnswerItem(BaseModel):
    questionId: str
    answer: Optional[str] = None


class SubmissionRequest(BaseModel):
    # validated by the scoring pipeline so malformed answers map to 400
    answers: Optional[Any] = None


class SubmissionResponse(BaseResponse):
    sessionId: str


class GradeEntry(BaseModel):
    responseId: str
    score: Optional[float] = Field(None, ge=0)
    isCorrect: Optional[bool] = None


class GradeRequest(BaseModel):
    grades: List[GradeEntry] = []
    feedback: Optional[str] = None


# ============================================================================
# COURSE PROGRESS MODELS
# ============================================================================

class ChapterProgressRequest(BaseModel):
    isCompleted: bool


# ============================================================================
# CODE EXECUTION MODELS
# ============================================================================

class CodeExecutionRequest(BaseModel):
    language: Optional[str] = None
    code: Optional[str] = None


class CodeExecutionResponse(BaseModel):
    output: Optional[str] = None
    error: Optional[str] = None


# ============================================================================
# ERROR MODELS
# ============================================================================

class ErrorDetail(BaseModel):
    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[Union[str, List[ErrorDetail]]] = None
    status_code: int
    request_id: Optional[str] = None
    correlation_id: Optional[str] = None
