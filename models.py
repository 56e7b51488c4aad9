from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Boolean, JSON, Text, Float
from sqlalchemy import UniqueConstraint, Index
from sqlalchemy.orm import declarative_base, relationship
import enum
from datetime import datetime
import uuid

Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid.uuid4())


class AssessmentType(enum.Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    BLENDED = "BLENDED"


class QuestionType(enum.Enum):
    MCQ = "MCQ"
    DESCRIPTIVE = "DESCRIPTIVE"
    PRACTICAL = "PRACTICAL"
    VIVA = "VIVA"
    PEN_PAPER = "PEN_PAPER"


class SessionStatus(enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# Course content


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, unique=True, nullable=False)

    courses = relationship("Course", back_populates="category")


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)  # Owning teacher (identity provider subject)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    category = relationship("Category", back_populates="courses")
    chapters = relationship(
        "Chapter", back_populates="course", cascade="all, delete-orphan", order_by="Chapter.position"
    )
    purchases = relationship("Purchase", back_populates="course", cascade="all, delete-orphan")


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, default=False, nullable=False)
    is_free = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="chapters")
    user_progress = relationship("UserProgress", back_populates="chapter", cascade="all, delete-orphan")


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="purchases")

    __table_args__ = (UniqueConstraint("user_id", "course_id", name="unique_user_course_purchase"),)


class UserProgress(Base):
    __tablename__ = "user_progress"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)
    chapter_id = Column(String(36), ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False, index=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    chapter = relationship("Chapter", back_populates="user_progress")

    # One row per student per chapter, upserted
    __table_args__ = (UniqueConstraint("user_id", "chapter_id", name="unique_user_chapter_progress"),)


# Assessments


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    created_by_id = Column(String, nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    assessment_type = Column(Enum(AssessmentType), nullable=False, default=AssessmentType.ONLINE)
    question_format = Column(JSON, nullable=False, default=list)
    inclusivity_mode = Column(Boolean, default=False, nullable=False)
    difficulty_level = Column(Integer, nullable=True, default=2)  # 1=EASY, 2=MEDIUM, 3=HARD
    is_published = Column(Boolean, default=False, nullable=False)
    results_published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    questions = relationship(
        "AssessmentQuestion",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="AssessmentQuestion.position",
    )
    sessions = relationship("AssessmentSession", back_populates="assessment", cascade="all, delete-orphan")


class AssessmentQuestion(Base):
    __tablename__ = "assessment_questions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    assessment_id = Column(String(36), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    question_type = Column(Enum(QuestionType), nullable=False)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=True)
    correct_answer = Column(Text, nullable=True)
    marks = Column(Integer, nullable=False, default=1)
    difficulty_level = Column(Integer, nullable=True, default=2)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    assessment = relationship("Assessment", back_populates="questions")
    responses = relationship("AssessmentResponse", back_populates="question", cascade="all, delete-orphan")


class AssessmentSession(Base):
    __tablename__ = "assessment_sessions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    assessment_id = Column(String(36), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    status = Column(Enum(SessionStatus), nullable=False, default=SessionStatus.IN_PROGRESS)
    start_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)
    score = Column(Float, nullable=True, default=0)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    assessment = relationship("Assessment", back_populates="sessions")
    responses = relationship("AssessmentResponse", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_session_assessment_user", "assessment_id", "user_id"),)


class AssessmentResponse(Base):
    __tablename__ = "assessment_responses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    session_id = Column(
        String(36), ForeignKey("assessment_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(
        String(36), ForeignKey("assessment_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    answer = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=True)
    score = Column(Float, nullable=True)
    ai_evaluation = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    session = relationship("AssessmentSession", back_populates="responses")
    question = relationship("AssessmentQuestion", back_populates="responses")
