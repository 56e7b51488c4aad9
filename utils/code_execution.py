"""
Code execution through a Judge0 instance: submit, wait, fetch the verdict.
"""

import time
from typing import Dict, Optional

import requests

from config import settings
from utils.error_handling import UpstreamServiceError
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("code_execution")

LANGUAGE_IDS = {
    "python": 71,
    "javascript": 63,
    "java": 62,
    "cpp": 54,
}

REQUEST_TIMEOUT_SECONDS = 15


def language_id(language: str) -> Optional[int]:
    return LANGUAGE_IDS.get(language)


def _headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-RapidAPI-Key": settings.JUDGE0_API_KEY,
        "X-RapidAPI-Host": settings.JUDGE0_API_HOST,
    }


def interpret_result(result: dict) -> Dict[str, str]:
    """Accepted runs yield {output}, everything else {error}"""
    if (result.get("status") or {}).get("description") == "Accepted":
        return {"output": result.get("stdout") or "No output"}
    return {"error": result.get("stderr") or result.get("compile_output") or "Execution error"}


def execute_code(language: str, code: str) -> Dict[str, str]:
    """
    Run a snippet on Judge0 with a single fixed wait before fetching the result

    Raises:
        ValueError: unsupported language
        UpstreamServiceError: submission rejected or Judge0 unreachable
    """
    lang_id = language_id(language)
    if lang_id is None:
        raise ValueError(f"Unsupported programming language: {language}")

    base_url = settings.JUDGE0_API_URL.rstrip("/")
    try:
        submit_response = requests.post(
            f"{base_url}/submissions",
            json={"language_id": lang_id, "source_code": code, "stdin": ""},
            headers=_headers(),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        token = submit_response.json().get("token")
        if not token:
            logger.error(
                "Judge0 submission returned no token",
                category=LogCategory.CODE_EXECUTION,
                extra={"status_code": submit_response.status_code},
            )
            raise UpstreamServiceError("Failed to submit code")

        time.sleep(settings.JUDGE0_POLL_DELAY_SECONDS)

        result_response = requests.get(
            f"{base_url}/submissions/{token}",
            params={"base64_encoded": "false"},
            headers=_headers(),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        result = result_response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("Code execution request failed", category=LogCategory.CODE_EXECUTION, exception=e)
        raise UpstreamServiceError("Internal server error")

    outcome = interpret_result(result)
    logger.info(
        "Code executed",
        category=LogCategory.CODE_EXECUTION,
        extra={"language": language, "accepted": "output" in outcome},
    )
    return outcome
