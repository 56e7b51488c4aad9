import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from models import (
    Assessment,
    AssessmentQuestion,
    AssessmentResponse,
    AssessmentSession,
    AssessmentType,
    QuestionType,
    SessionStatus,
    UserProgress,
)
from utils.error_handling import transaction


class TestUserProgressModel:
    """One progress row per student and chapter"""

    def test_duplicate_progress_rejected(self, test_db, make_course):
        chapter_id = make_course(published=1).chapters[0].id

        test_db.add(UserProgress(user_id="student", chapter_id=chapter_id, is_completed=True))
        test_db.commit()

        test_db.add(UserProgress(user_id="student", chapter_id=chapter_id, is_completed=False))
        with pytest.raises(IntegrityError):
            test_db.commit()


class TestAssessmentModel:
    """Assessment defaults and cascades"""

    def test_defaults(self, test_db):
        assessment = Assessment(title="Quiz", created_by_id="teacher")
        test_db.add(assessment)
        test_db.commit()

        assert assessment.assessment_type == AssessmentType.ONLINE
        assert assessment.difficulty_level == 2
        assert assessment.question_format == []
        assert assessment.is_published is False
        assert assessment.results_published is False

    def test_delete_cascades_to_questions_sessions_and_responses(self, test_db, make_assessment):
        assessment = make_assessment()
        session = AssessmentSession(assessment_id=assessment.id, user_id="student", status=SessionStatus.COMPLETED)
        session.responses.append(AssessmentResponse(question_id=assessment.questions[0].id, answer="B"))
        test_db.add(session)
        test_db.commit()

        test_db.delete(assessment)
        test_db.commit()

        assert test_db.query(AssessmentQuestion).count() == 0
        assert test_db.query(AssessmentSession).count() == 0
        assert test_db.query(AssessmentResponse).count() == 0

    def test_questions_ordered_by_position(self, test_db, make_assessment):
        assessment = make_assessment()
        assessment.questions.append(
            AssessmentQuestion(position=-1, question_type=QuestionType.DESCRIPTIVE, question="Warm-up", marks=1)
        )
        test_db.commit()
        test_db.expire(assessment)

        assert [question.question for question in assessment.questions] == ["Warm-up", "Which letter comes second?"]


class TestTransaction:
    """Write failures roll back and surface as HTTP errors"""

    def test_integrity_error_becomes_409(self, test_db, make_course):
        chapter_id = make_course(published=1).chapters[0].id
        test_db.add(UserProgress(user_id="student", chapter_id=chapter_id, is_completed=True))
        test_db.commit()

        with pytest.raises(HTTPException) as exc_info:
            with transaction(test_db, "duplicate progress"):
                test_db.add(UserProgress(user_id="student", chapter_id=chapter_id, is_completed=False))

        assert exc_info.value.status_code == 409
        assert test_db.query(UserProgress).count() == 1

    def test_http_errors_pass_through(self, test_db):
        with pytest.raises(HTTPException) as exc_info:
            with transaction(test_db, "noop"):
                raise HTTPException(status_code=404, detail="Missing")

        assert exc_info.value.detail == "Missing"
