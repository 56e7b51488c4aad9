"""
Code Execution Service Router
Forwards snippets from the coding platform to the Judge0 sandbox
"""

from fastapi import APIRouter, Depends, HTTPException, status

from schemas.api_models import CodeExecutionRequest, CodeExecutionResponse
from utils.auth_dependencies import Caller, get_current_caller
from utils.code_execution import execute_code
from utils.error_handling import UpstreamServiceError

router = APIRouter()


@router.post(
    "/execute-code",
    response_model=CodeExecutionResponse,
    response_model_exclude_none=True,
    summary="Run a code snippet",
)
def run_code(payload: CodeExecutionRequest, caller: Caller = Depends(get_current_caller)):
    """
    Supported languages: python, javascript, java, cpp. An accepted run returns
    `output`, anything else `error` with stderr or the compiler output.
    """
    if not payload.language or not payload.code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Language and code are required")

    try:
        return execute_code(payload.language, payload.code)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported programming language")
    except UpstreamServiceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
