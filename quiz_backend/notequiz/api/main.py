import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from notequiz.api import groups, notes
from notequiz.api.dependencies import get_store
from notequiz.config import get_settings
from notequiz.storage.json_store import NoteQuizJsonStore

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "System", "description": "System and service endpoints"},
    {"name": "Notes", "description": "Note lookup and quiz generation endpoints"},
    {"name": "Groups", "description": "Group management endpoints"},
]

app = FastAPI(
    title="Note Quiz Backend",
    description="Backend service for study groups and for generating quizzes from note PDFs.",
    version="0.2.0",
    openapi_tags=openapi_tags,
)

# CORS configuration to allow frontend integration (adjust origins in env if needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(notes.router)
app.include_router(groups.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report unexpected failures as a generic JSON 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/", summary="Health Check", tags=["System"])
def health_check(store: NoteQuizJsonStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
        JSON payload with a simple 'Healthy' message and the current data file path.
    """
    # Load ensures file exists with default structure
    _ = store.load_all()
    return {"message": "Healthy", "data_file": store.path}


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the app with uvicorn on the configured HOST and PORT."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
