# taskflow/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import logging

from taskflow.api.activity_log import router as activity_log_router
from taskflow.api.analytics import router as analytics_router
from taskflow.api.auth import router as auth_router
from taskflow.api.notification import router as notification_router
from taskflow.api.project import router as project_router
from taskflow.api.task import router as task_router
from taskflow.api.team import router as team_router
from taskflow.api.user import router as user_router

from taskflow.core.settings import settings
from taskflow.core.exceptions import NotFoundError, PermissionDeniedError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn.error")

app = FastAPI(
    title="TaskFlow API",
    version="1.0.0",
    description="Team task tracking with notifications and an activity audit trail",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(team_router)
app.include_router(project_router)
app.include_router(task_router)
app.include_router(notification_router)
app.include_router(activity_log_router)
app.include_router(analytics_router)

@app.get("/", tags=["Health"])
def root():
    return {"status": "TaskFlow API is running!"}

@app.get("/health", tags=["Health"])
def health():
    return {"ok": True}

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting TaskFlow API (env={settings.ENV})")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Stopping TaskFlow API")

@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )

@app.exception_handler(PermissionDeniedError)
async def permission_denied_exception_handler(request: Request, exc: PermissionDeniedError):
    return JSONResponse(
        status_code=403,
        content={"detail": str(exc)},
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskflow.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=settings.DEBUG,
    )
