from unittest.mock import MagicMock

import pytest
import requests

import utils.code_execution as code_execution
from utils.code_execution import LANGUAGE_IDS, execute_code, interpret_result
from utils.error_handling import UpstreamServiceError


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def judge0(monkeypatch):
    """Patch the HTTP calls and the wait of the Judge0 client"""
    post = MagicMock(return_value=json_response({"token": "abc123"}))
    get = MagicMock()
    monkeypatch.setattr(code_execution.requests, "post", post)
    monkeypatch.setattr(code_execution.requests, "get", get)
    monkeypatch.setattr(code_execution.time, "sleep", lambda seconds: None)
    return post, get


class TestInterpretResult:
    def test_accepted_with_stdout(self):
        assert interpret_result({"status": {"description": "Accepted"}, "stdout": "hi\n"}) == {"output": "hi\n"}

    def test_accepted_without_stdout(self):
        assert interpret_result({"status": {"description": "Accepted"}, "stdout": None}) == {"output": "No output"}

    def test_runtime_error_prefers_stderr(self):
        result = {"status": {"description": "Runtime Error"}, "stderr": "boom", "compile_output": "warn"}
        assert interpret_result(result) == {"error": "boom"}

    def test_compile_error(self):
        result = {"status": {"description": "Compilation Error"}, "compile_output": "syntax error"}
        assert interpret_result(result) == {"error": "syntax error"}

    def test_unknown_failure(self):
        assert interpret_result({}) == {"error": "Execution error"}


class TestExecuteCode:
    def test_language_table(self):
        assert LANGUAGE_IDS == {"python": 71, "javascript": 63, "java": 62, "cpp": 54}

    def test_submits_then_fetches(self, judge0):
        post, get = judge0
        get.return_value = json_response({"status": {"description": "Accepted"}, "stdout": "42\n"})

        assert execute_code("python", "print(42)") == {"output": "42\n"}

        assert post.call_args.kwargs["json"] == {"language_id": 71, "source_code": "print(42)", "stdin": ""}
        assert get.call_args.args[0].endswith("/submissions/abc123")
        assert get.call_args.kwargs["params"] == {"base64_encoded": "false"}

    def test_unsupported_language(self, judge0):
        post, _ = judge0
        with pytest.raises(ValueError):
            execute_code("ruby", "puts 1")
        post.assert_not_called()

    def test_missing_token(self, judge0):
        post, get = judge0
        post.return_value = json_response({"error": "quota"}, status_code=429)

        with pytest.raises(UpstreamServiceError, match="Failed to submit code"):
            execute_code("python", "print(1)")
        get.assert_not_called()

    def test_transport_failure(self, judge0):
        post, _ = judge0
        post.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(UpstreamServiceError):
            execute_code("python", "print(1)")
