"""
FastAPI application entry point.

Run:
    uvicorn paperpile_navigate.backend.main:app --reload
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paperpile_navigate.backend.routes.papers import router as papers_router
from paperpile_navigate.backend.routes.tags import router as tags_router
from paperpile_navigate.backend.routes.worldlines import router as worldlines_router
from paperpile_navigate.database.connection import DatabaseConnection
from paperpile_navigate.database.schema import init_database
from paperpile_navigate.utils.config import settings
from paperpile_navigate.utils.errors import NotFoundError, ValidationError
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create any missing tables on startup
    init_database(DatabaseConnection().engine)
    logger.info(f"paperpile-navigate API started ({settings.environment})")
    yield


app = FastAPI(title="paperpile-navigate API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(worldlines_router)
app.include_router(papers_router)
app.include_router(tags_router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/api/health")
def health_check():
    return {"status": "healthy"}
