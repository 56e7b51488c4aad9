"""
Learning Management & Assessment API v1.0
Assessment lifecycle, course progress and teacher analytics behind one versioned API
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime

from routes import analytics, assessments, code_execution, courses, responses
from config import settings

from utils.structured_logging import (
    configure_logging,
    get_logger,
    log_request_middleware,
    LogCategory,
)

configure_logging(level=settings.LOG_LEVEL, json_output=True)
logger = get_logger("app")

from schemas.openapi_models import COMMON_RESPONSES, OpenAPIMetadata, OpenAPITags

app = FastAPI(
    title=OpenAPIMetadata.TITLE,
    description=OpenAPIMetadata.DESCRIPTION,
    version=OpenAPIMetadata.VERSION,
    contact=OpenAPIMetadata.CONTACT,
    license_info=OpenAPIMetadata.LICENSE_INFO,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    servers=OpenAPIMetadata.SERVERS,
    openapi_tags=[
        OpenAPITags.ASSESSMENTS,
        OpenAPITags.ANALYTICS,
        OpenAPITags.COURSES,
        OpenAPITags.CODE,
        OpenAPITags.SYSTEM,
    ],
)

# CORS configuration - Load from environment
origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Correlation-ID"],
    # Content-Disposition carries the CSV export filename
    expose_headers=["Content-Disposition", "X-Correlation-ID", "X-Request-ID"],
)


@app.middleware("http")
async def structured_logging_middleware(request: Request, call_next):
    return await log_request_middleware(request, call_next)


def error_response(request: Request, status_code: int, error, detail, headers=None) -> JSONResponse:
    """Every error leaves the API in the same envelope"""
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "success": False,
            "error": error,
            "detail": detail,
            "status_code": status_code,
            "request_id": getattr(request.state, "request_id", None),
            "correlation_id": getattr(request.state, "correlation_id", None),
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"], "code": error["type"]}
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error",
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        error_type="RequestValidationError",
        error_message=f"{len(errors)} validation errors",
        extra={"errors": errors},
    )
    return error_response(request, 422, "Validation Error", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"HTTP {exc.status_code}",
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        response_status=exc.status_code,
        error_message=str(exc.detail),
        user_id=getattr(request.state, "user_id", None),
    )
    return error_response(request, exc.status_code, exc.detail, exc.detail, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.critical(
        "Unexpected server error",
        category=LogCategory.ERROR,
        exception=exc,
        request_method=request.method,
        request_path=request.url.path,
        user_id=getattr(request.state, "user_id", None),
    )
    return error_response(
        request, 500, "Internal Server Error", "An unexpected error occurred. Please try again later."
    )


# v1 routers: (module, prefix, tag)
ROUTERS = [
    (assessments, "/api/v1/assessments", OpenAPITags.ASSESSMENTS),
    (responses, "/api/v1/assessments", OpenAPITags.ASSESSMENTS),
    (analytics, "/api/v1/analytics", OpenAPITags.ANALYTICS),
    (courses, "/api/v1", OpenAPITags.COURSES),
    (code_execution, "/api/v1", OpenAPITags.CODE),
]

for module, prefix, tag in ROUTERS:
    app.include_router(module.router, prefix=prefix, tags=[tag["name"]], responses=COMMON_RESPONSES)


@app.get(
    "/",
    tags=[OpenAPITags.SYSTEM["name"]],
    summary="API Information",
    description="Get API information including version, status, and available services",
)
async def root():
    return {
        "name": OpenAPIMetadata.TITLE,
        "version": OpenAPIMetadata.VERSION,
        "status": "operational",
        "documentation": {"swagger": "/docs", "redoc": "/redoc", "openapi_spec": "/openapi.json"},
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "assessments": {"endpoint": "/api/v1/assessments", "description": "Assessment lifecycle and submissions"},
            "analytics": {"endpoint": "/api/v1/analytics", "description": "Teacher analytics"},
            "courses": {"endpoint": "/api/v1/dashboard/courses", "description": "Student course progress"},
            "code": {"endpoint": "/api/v1/execute-code", "description": "Remote code execution"},
        },
    }


@app.get(
    "/health",
    tags=[OpenAPITags.SYSTEM["name"]],
    summary="Health Check",
    description="Service health monitoring endpoint for uptime checks",
)
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": OpenAPIMetadata.VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
