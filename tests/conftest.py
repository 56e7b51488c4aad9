import pytest
import os
import sys
from datetime import datetime
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment variables
os.environ["NODE_ENV"] = "test"
os.environ["SQLALCHEMY_TEST_DATABASE_URL"] = "sqlite://"
os.environ["POSTGRES_USER"] = "test_user"
os.environ["POSTGRES_PASSWORD"] = "test_password"
os.environ["POSTGRES_HOST"] = "localhost"
os.environ["POSTGRES_DATABASE"] = "test_db"
os.environ["POSTGRES_PORT"] = "5432"
os.environ["OPENAI_API_KEY"] = "test_openai_key"
os.environ["AUTH_JWT_SECRET"] = "test-identity-secret"
os.environ["JUDGE0_POLL_DELAY_SECONDS"] = "0"

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app import app
from db import get_db
from models import (
    Assessment,
    AssessmentQuestion,
    AssessmentType,
    Base,
    Category,
    Chapter,
    Course,
    Purchase,
    QuestionType,
    UserProgress,
)
from utils.jwt_utils import token_verifier

INSTRUCTOR_ID = "user_instructor_1"
OTHER_INSTRUCTOR_ID = "user_instructor_2"
STUDENT_ID = "user_student_1"


@pytest.fixture(scope="function")
def test_engine():
    """In-memory SQLite engine shared by every connection of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create test database session"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture(scope="function")
def client(test_db):
    """Create test client with test database"""

    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clean up dependency override
    app.dependency_overrides.clear()


def bearer(user_id: str, role: str = None) -> dict:
    return {"Authorization": f"Bearer {token_verifier.create_token(user_id, role=role)}"}


@pytest.fixture
def instructor_headers():
    return bearer(INSTRUCTOR_ID, role="instructor")


@pytest.fixture
def other_instructor_headers():
    return bearer(OTHER_INSTRUCTOR_ID, role="instructor")


@pytest.fixture
def student_headers():
    return bearer(STUDENT_ID)


# Data builders


@pytest.fixture
def make_course(test_db):
    """Course with `published` + `drafts` chapters owned by a teacher"""

    def _make(title="Python Basics", owner=INSTRUCTOR_ID, price=100.0, published=3, drafts=0, category=None):
        course = Course(title=title, user_id=owner, price=price, is_published=True)
        if category:
            course.category = Category(name=category)
        for position in range(published + drafts):
            course.chapters.append(
                Chapter(title=f"Chapter {position + 1}", position=position, is_published=position < published)
            )
        test_db.add(course)
        test_db.commit()
        return course

    return _make


@pytest.fixture
def make_purchase(test_db):
    def _make(course, user_id=STUDENT_ID, created_at=None):
        purchase = Purchase(user_id=user_id, course_id=course.id, created_at=created_at or datetime.utcnow())
        test_db.add(purchase)
        test_db.commit()
        return purchase

    return _make


@pytest.fixture
def complete_chapters(test_db):
    def _complete(chapters, user_id=STUDENT_ID, updated_at=None):
        for chapter in chapters:
            test_db.add(
                UserProgress(
                    user_id=user_id,
                    chapter_id=chapter.id,
                    is_completed=True,
                    updated_at=updated_at or datetime.utcnow(),
                )
            )
        test_db.commit()

    return _complete


@pytest.fixture
def make_assessment(test_db):
    """Assessment with one MCQ question worth `marks`"""

    def _make(
        title="Quiz 1",
        owner=INSTRUCTOR_ID,
        published=True,
        results_published=False,
        difficulty=2,
        marks=2,
        correct_answer="B",
    ):
        assessment = Assessment(
            title=title,
            created_by_id=owner,
            assessment_type=AssessmentType.ONLINE,
            question_format=["MCQ"],
            difficulty_level=difficulty,
            is_published=published,
            results_published=results_published,
        )
        assessment.questions.append(
            AssessmentQuestion(
                position=0,
                question_type=QuestionType.MCQ,
                question="Which letter comes second?",
                options=["A", "B", "C", "D"],
                correct_answer=correct_answer,
                marks=marks,
                difficulty_level=difficulty,
            )
        )
        test_db.add(assessment)
        test_db.commit()
        return assessment

    return _make
