import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mockprep.config import FRONTEND_URL, LOG_LEVEL
from mockprep.database import init_db
from mockprep.errors import MockPrepError
from mockprep.routers import (
    auth_router,
    users_router,
    quiz_router,
    jd_router,
    question_bank_router,
    admin_router,
    interview_router,
)

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(title="MockPrep API", lifespan=lifespan)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(quiz_router)
app.include_router(jd_router)
app.include_router(question_bank_router)
app.include_router(admin_router)
app.include_router(interview_router)


def _strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


allowed_origins = [
    _strip_trailing_slash(FRONTEND_URL),
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MockPrepError)
async def mockprep_error_handler(request: Request, exc: MockPrepError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "MockPrep API is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend:app", host="0.0.0.0", port=8000, reload=True)
