import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.config import settings
from marketplace.database import check_integrity, init_db
from marketplace.errors import MarketplaceError
from marketplace.routers import announcements, applications, auth, chat, files, users
from marketplace.utils.filesystem import ensure_data_dirs

logger = logging.getLogger("marketplace")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create the schema if needed and integrity-check the database
    ensure_data_dirs()
    try:
        init_db()
        result = check_integrity()
        if result == "ok":
            logger.info("Database integrity check passed (%s).", settings.db_path)
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except Exception as exc:
        logger.error("Could not initialise database at %s: %s", settings.db_path, exc)
        raise
    yield


app = FastAPI(
    title="Job Marketplace",
    description="Job announcements, applications, files and recruiter/applicant chat",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(files.router, prefix=settings.api_prefix)
app.include_router(announcements.router, prefix=settings.api_prefix)
app.include_router(applications.router, prefix=settings.api_prefix)
app.include_router(chat.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
