from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from myos.database.engine import engine, create_db_and_tables
from myos.routers import checkins, tasks, habits, prayers, journal, labels, search, today, actions, sync, settings as settings_router
from myos.core.config import settings
from myos.core.deps import AppContainer

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")

    create_db_and_tables()
    logger.info("✓ Local store ready")

    container = AppContainer(engine)
    app.state.container = container

    await container.scheduler.start(sync_on_start=settings.SYNC_ON_STARTUP)
    logger.info("✓ Sync scheduler started")

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown initiated...")
    await container.scheduler.stop()
    logger.info("✓ Sync scheduler stopped")
    logger.info("Application shutdown complete")


app = FastAPI(
    title="MyOS",
    description="Local-first personal organiser: check-ins, tasks, habits, prayers and journal with background sync",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(today.router)          # Today: /today (dashboard)
app.include_router(checkins.router)
app.include_router(tasks.router)
app.include_router(habits.router)
app.include_router(prayers.router)
app.include_router(journal.router)
app.include_router(labels.router)
app.include_router(search.router)         # Search: /search?q=
app.include_router(actions.router)        # Actions: /actions (log, undo)
app.include_router(sync.router)           # Sync: /sync/* (manual, status, connectivity)
app.include_router(settings_router.router)  # Settings: /settings/* (remote endpoint, session)


@app.get("/")
def read_root():
    return {
        "message": "Welcome to MyOS",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
