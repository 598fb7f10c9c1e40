from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from articles.interfaces.routes import router as articles_router
from auth.interfaces.routes import router as auth_router
from categories.application.services import seed_default_categories
from categories.interfaces.routes import router as categories_router
from comments.interfaces.routes import router as comments_router
from locks.interfaces.routes import router as locks_router
from shared.config import settings
from shared.error_handlers import setup_exception_handlers
from shared.infrastructure.database import async_session, create_tables, engine
from shared.infrastructure.scheduler import shutdown_scheduler, start_scheduler
from shared.infrastructure.unit_of_work import DbUnitOfWork
from shared.logging import logger
from shared.middleware import CorrelationIdMiddleware
from versions.interfaces.routes import router as versions_router


def _ensure_sqlite_directory() -> None:
    prefix = "sqlite+aiosqlite:///"
    if settings.DATABASE_URL.startswith(prefix):
        path = settings.DATABASE_URL[len(prefix):]
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_sqlite_directory()
    await create_tables()
    if settings.SEED_DEFAULT_CATEGORIES:
        async with async_session() as session:
            await seed_default_categories(DbUnitOfWork(session))
    start_scheduler()
    logger.info("Knowledge base started", env=settings.APP_ENV)
    yield
    shutdown_scheduler()
    await engine.dispose()


app = FastAPI(
    title="Knowledge Base",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)

setup_exception_handlers(app)

app.include_router(auth_router)
app.include_router(articles_router)
app.include_router(locks_router)
app.include_router(versions_router)
app.include_router(comments_router)
app.include_router(categories_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
