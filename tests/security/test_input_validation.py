import pytest
from fastapi import status
from pydantic import ValidationError

from schemas.api_models import AssessmentCreateRequest, GradeEntry, QuestionCreateRequest

API = "/api/v1/assessments"


class TestRequestSchemas:
    """Validation rules on the request models"""

    def test_assessment_defaults(self):
        request = AssessmentCreateRequest(title="Quiz")
        assert request.assessmentType == "ONLINE"
        assert request.aiGenerated is False

    def test_unknown_assessment_type(self):
        with pytest.raises(ValidationError):
            AssessmentCreateRequest(title="Quiz", assessmentType="HOMEWORK")

    def test_question_text_required(self):
        with pytest.raises(ValidationError):
            QuestionCreateRequest(questionType="MCQ", question="")

    def test_negative_marks_rejected(self):
        with pytest.raises(ValidationError):
            QuestionCreateRequest(questionType="MCQ", question="Q?", marks=-1)

    def test_negative_grade_rejected(self):
        with pytest.raises(ValidationError):
            GradeEntry(responseId="r1", score=-0.5)


class TestEndpointValidation:
    """Missing or malformed input fails with 400 or 422 and the standard envelope"""

    def test_missing_title(self, client, instructor_headers):
        response = client.post(API, json={"description": "No title"}, headers=instructor_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Title is required"

    def test_missing_topic(self, client, instructor_headers):
        response = client.post(f"{API}/generate", json={}, headers=instructor_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Topic is required"

    def test_invalid_assessment_type(self, client, instructor_headers):
        response = client.post(API, json={"title": "Quiz", "assessmentType": "HOMEWORK"}, headers=instructor_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation Error"
        assert any(error["field"].endswith("assessmentType") for error in body["detail"])

    def test_publish_toggle_requires_flag(self, client, make_assessment, instructor_headers):
        assessment = make_assessment()

        response = client.patch(f"{API}/{assessment.id}", json={}, headers=instructor_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize("answers", ["B", {"questionId": "q"}, [{"answer": "B"}], None])
    def test_malformed_answers(self, client, make_assessment, student_headers, answers):
        assessment = make_assessment()

        response = client.post(f"{API}/{assessment.id}/responses", json={"answers": answers}, headers=student_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid answers data"

    def test_missing_submission_body(self, client, make_assessment, student_headers):
        assessment = make_assessment()

        response = client.post(f"{API}/{assessment.id}/responses", headers=student_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize("payload", [{}, {"language": "python"}, {"code": "print(1)"}, {"language": "", "code": ""}])
    def test_code_execution_requires_language_and_code(self, client, student_headers, payload):
        response = client.post("/api/v1/execute-code", json=payload, headers=student_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Language and code are required"

    def test_chapter_progress_requires_flag(self, client, make_course, student_headers):
        course = make_course()

        response = client.put(
            f"/api/v1/courses/{course.id}/chapters/{course.chapters[0].id}/progress",
            json={"isCompleted": "maybe"},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
