from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .logging_setup import configure_logging, get_logger
from .routers import todos as todos_router
from .services import TodoNotFoundError, TodoService, get_todo_service
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": "CRUD operations for Todo items plus overdue, urgent and statistics views.",
    },
]

_settings = get_settings()
configure_logging(level=_settings.log_level, json_logs=_settings.log_json)
logger = get_logger(__name__)

app = FastAPI(
    title="Todo Backend",
    description="Backend API service for managing prioritized todos with deadlines.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS)
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format (HTTP 400):
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    logger.info("Rejected %s %s: validation failed", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            # ctx may carry the raw exception object, which is not JSON serializable
            "detail": [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()],
        },
    )


@app.exception_handler(TodoNotFoundError)
async def not_found_exception_handler(request: Request, exc: TodoNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Todo not found"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and answer with a generic 500 body."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "InternalServerError", "message": str(exc)},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(service: TodoService = Depends(get_todo_service)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the active storage backend.
    """
    return {"message": "Healthy", "backend": service.backend}


app.include_router(todos_router.router)
