"""
OpenAPI Documentation Models
Tags, metadata, security schemes and shared error responses for the API docs
"""

from .api_models import ErrorResponse


# ============================================================================
# OPENAPI DOCUMENTATION ENHANCEMENTS
# ============================================================================


class OpenAPITags:
    """Centralized tag definitions for OpenAPI documentation"""

    ASSESSMENTS = {
        "name": "📝 Assessments",
        "description": """
        **Assessment Lifecycle**

        - **Authoring**: create assessments, manage questions, AI-assisted generation
        - **Publication**: publish assessments and, separately, their results
        - **Submissions**: student attempts, grading, result views and CSV export
        """,
    }

    ANALYTICS = {
        "name": "📊 Analytics",
        "description": """
        **Teacher Analytics**

        Revenue, assessment performance and per-student progress on the
        teacher's own courses and assessments. Dashboard endpoints always
        answer with a complete (possibly zeroed) shape.
        """,
    }

    COURSES = {
        "name": "📚 Courses",
        "description": """
        **Student Course Progress**

        Purchased courses split by completion and per-chapter progress updates.
        """,
    }

    CODE = {
        "name": "💻 Code Execution",
        "description": """
        **Coding Platform**

        Runs snippets on a remote Judge0 sandbox and returns its output or error.
        """,
    }

    SYSTEM = {
        "name": "🔧 System",
        "description": """
        **System Information & Health**

        - **Health Checks**: service availability monitoring
        - **API Information**: version and endpoint discovery
        """,
    }


class APIExamples:
    """Centralized API examples for documentation"""

    VALIDATION_ERROR_RESPONSE = {
        "success": False,
        "error": "Validation Error",
        "detail": [{"field": "body.isPublished", "message": "Field required", "code": "missing"}],
        "status_code": 422,
    }

    NOT_FOUND_RESPONSE = {
        "success": False,
        "error": "Assessment not found",
        "detail": "Assessment not found",
        "status_code": 404,
    }

    FORBIDDEN_RESPONSE = {
        "success": False,
        "error": "Access denied. Only instructors can create assessments.",
        "detail": "Access denied. Only instructors can create assessments.",
        "status_code": 403,
    }


class OpenAPIMetadata:
    """OpenAPI metadata for the documentation pages"""

    TITLE = "🎓 Learning Management & Assessment API"

    DESCRIPTION = """
    ## Learning Management & Assessment API v1.0

    Backend for course progress, teacher analytics and the assessment module.

    ### 🚀 Key Features

    - **Assessments**: authoring, AI-assisted question generation, publication
    - **Submissions**: one session per attempt, manual and MCQ auto-grading
    - **Results**: gated student result view and CSV export
    - **Analytics**: revenue, assessment performance, per-student trends

    ### 🔒 Authentication

    Every endpoint except the system ones expects an identity provider token
    in the `Authorization: Bearer <token>` header. Instructor-only endpoints
    additionally require the instructor role claim.

    ---

    **API Version**: 1.0.0
    **Documentation**: [Swagger UI](/docs) | [ReDoc](/redoc)
    """

    VERSION = "1.0.0"

    CONTACT = {
        "name": "Learning Management & Assessment API",
        "email": "support@example.com",
    }

    LICENSE_INFO = {"name": "MIT License", "url": "https://opensource.org/licenses/MIT"}

    SERVERS = [
        {"url": "http://localhost:8000", "description": "Development server"},
    ]


# ============================================================================
# SHARED ERROR RESPONSES
# ============================================================================


def error_example(status_code: int, message: str) -> dict:
    return {"success": False, "error": message, "detail": message, "status_code": status_code}


def documented_error(description: str, example: dict = None) -> dict:
    content = {"schema": ErrorResponse.model_json_schema()}
    if example is not None:
        content["example"] = example
    return {"description": description, "content": {"application/json": content}}


COMMON_RESPONSES = {
    400: documented_error("Bad Request - Missing or malformed input", error_example(400, "Title is required")),
    401: documented_error("Unauthorized - Missing or invalid bearer token", error_example(401, "Unauthorized")),
    403: documented_error("Forbidden - Instructor role required", APIExamples.FORBIDDEN_RESPONSE),
    404: documented_error(
        "Not Found - Resource does not exist or is not visible to the caller", APIExamples.NOT_FOUND_RESPONSE
    ),
    422: documented_error("Validation Error - Request body failed schema validation", APIExamples.VALIDATION_ERROR_RESPONSE),
    500: documented_error(
        "Internal Server Error - Unexpected or upstream failure",
        error_example(500, "An unexpected error occurred. Please try again later."),
    ),
}
