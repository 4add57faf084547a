from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weekgrid.api.routes import (
    calendar,
    courses,
    health,
    schedules,
    special_care,
    tasks,
    teachers,
    weekly_notes,
)
from weekgrid.core.config import get_settings
from weekgrid.core.exceptions import AppError
from weekgrid.core.logging import configure_logging
from weekgrid.core.middleware import MutationLoggingMiddleware
from weekgrid.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(
    MutationLoggingMiddleware,
    max_bytes=settings.max_request_size_bytes,
    log_bodies=settings.log_request_bodies,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(teachers.router, prefix=f"{settings.api_prefix}/teachers", tags=["teachers"])
app.include_router(schedules.router, prefix=f"{settings.api_prefix}/schedules", tags=["schedules"])
app.include_router(courses.router, prefix=f"{settings.api_prefix}/courses", tags=["courses"])
app.include_router(special_care.router, prefix=f"{settings.api_prefix}/special-care", tags=["special-care"])
app.include_router(calendar.router, prefix=f"{settings.api_prefix}/calendar", tags=["calendar"])
app.include_router(tasks.router, prefix=f"{settings.api_prefix}/tasks", tags=["tasks"])
app.include_router(weekly_notes.router, prefix=f"{settings.api_prefix}/weekly-notes", tags=["weekly-notes"])
