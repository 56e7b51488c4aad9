"""
Security tests for bearer-token authentication and role checks
"""

import jwt
import pytest
from datetime import datetime, timedelta, timezone
from fastapi import status

from utils.jwt_utils import IdentityTokenVerifier, InvalidTokenError, token_verifier

PROTECTED_ENDPOINTS = [
    ("get", "/api/v1/assessments"),
    ("post", "/api/v1/assessments"),
    ("get", "/api/v1/assessments/published"),
    ("get", "/api/v1/dashboard/courses"),
    ("get", "/api/v1/analytics"),
    ("post", "/api/v1/execute-code"),
]


def signed(payload, secret="test-identity-secret"):
    return {"Authorization": f"Bearer {jwt.encode(payload, secret, algorithm='HS256')}"}


class TestTokenVerifier:
    def test_round_trip_with_role(self):
        payload = token_verifier.decode(token_verifier.create_token("user_1", role="instructor"))

        assert payload["sub"] == "user_1"
        assert token_verifier.extract_role(payload) == "instructor"

    def test_nested_role_claim(self):
        verifier = IdentityTokenVerifier(secret="s", role_claim="public_metadata.role")

        payload = verifier.decode(verifier.create_token("user_1", role="instructor"))

        assert payload["public_metadata"] == {"role": "instructor"}
        assert verifier.extract_role(payload) == "instructor"

    def test_missing_role(self):
        assert token_verifier.extract_role({"sub": "user_1"}) is None

    def test_expired_token(self):
        token = token_verifier.create_token("user_1", expires_hours=-1)

        with pytest.raises(InvalidTokenError, match="expired"):
            token_verifier.decode(token)

    def test_wrong_secret(self):
        token = IdentityTokenVerifier(secret="other").create_token("user_1")

        with pytest.raises(InvalidTokenError):
            token_verifier.decode(token)


class TestEndpointAuthentication:
    """Every endpoint except the health checks needs a valid token"""

    @pytest.mark.parametrize("method,path", PROTECTED_ENDPOINTS)
    def test_missing_token(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_malformed_header(self, client):
        response = client.get("/api/v1/assessments", headers={"Authorization": "Token abc"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_garbage_token(self, client):
        response = client.get("/api/v1/assessments", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_expired_token(self, client):
        past = datetime.now(timezone.utc) - timedelta(hours=1)

        response = client.get("/api/v1/assessments", headers=signed({"sub": "user_1", "exp": past}))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_signed_with_other_secret(self, client):
        response = client.get("/api/v1/assessments", headers=signed({"sub": "user_1"}, secret="attacker"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_without_subject(self, client):
        response = client.get("/api/v1/assessments", headers=signed({"role": "instructor"}))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_valid_token(self, client, student_headers):
        response = client.get("/api/v1/assessments", headers=student_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    @pytest.mark.parametrize("path", ["/", "/health"])
    def test_public_endpoints(self, client, path):
        assert client.get(path).status_code == status.HTTP_200_OK


class TestRoleChecks:
    """Instructor-only endpoints reject students with 403 before reading the body"""

    @pytest.mark.parametrize(
        "method,path,action",
        [
            ("post", "/api/v1/assessments", "create assessments"),
            ("post", "/api/v1/assessments/generate", "generate assessments"),
            ("get", "/api/v1/analytics/students", "view analytics"),
        ],
    )
    def test_student_forbidden(self, client, student_headers, method, path, action):
        response = getattr(client, method)(path, headers=student_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == f"Access denied. Only instructors can {action}."

    def test_error_envelope(self, client, student_headers):
        body = client.post("/api/v1/assessments", json={}, headers=student_headers).json()

        assert body["success"] is False
        assert body["status_code"] == 403
        assert body["error"] == body["detail"]
