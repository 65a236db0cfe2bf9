import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.adapters.cleanup_jobs import CleanupScheduler
from src.adapters.fs.filestore import FileSystemStore
from src.api.deps import CleanupRulesAdapter, get_hub, get_settings
from src.app_shell.config import ConfigError, validate_ops_rules
from src.components.cleanup import CleanupInput, CleanupOutput, run_cleanup
from src.rules.loader import load_rules
from src.rules.models import Rules
from src.shell.http.health import StartupTracker, build_default_registry, create_health_router
from src.shell.realtime.hub import RoomHub

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def build_cleanup_scheduler(hub: RoomHub, rules: Rules, uploads: FileSystemStore) -> CleanupScheduler:
    cleanup_rules = CleanupRulesAdapter(rules)

    def run_pass() -> CleanupOutput:
        out = run_cleanup(
            CleanupInput(),
            repo=hub.repo,
            uploads=uploads,
            time=hub.clock,
            activity=hub,
            rules=cleanup_rules,
        )
        logger.info("Cleanup pass finished: %d room(s) deleted", len(out.deleted))
        return out

    return CleanupScheduler(run_pass, interval_seconds=rules.cleanup.interval_hours * 3600)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError, ConfigError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    scheduler: CleanupScheduler | None = None
    if rules.cleanup.enabled:
        hub = get_hub(settings, rules)
        scheduler = build_cleanup_scheduler(hub, rules, FileSystemStore(settings.uploads_dir(rules)))
        scheduler.start()

    StartupTracker.mark_started()
    yield

    if scheduler is not None:
        scheduler.stop()
    StartupTracker.reset()


app = FastAPI(
    title="Infinite Canvas Server",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import realtime, rooms, status, uploads  # noqa: E402

app.include_router(rooms.router, prefix="/api/room", tags=["Rooms"])
app.include_router(uploads.router, prefix="/api", tags=["Uploads"])
app.include_router(status.router, prefix="/api", tags=["Status"])
app.include_router(create_health_router(build_default_registry(get_settings().data_dir), VERSION))
app.include_router(realtime.router, tags=["Realtime"])


# CORS (Allow Frontend)
def _cors_origins() -> list[str]:
    try:
        return load_rules(get_settings().rules_path).ops.cors_origins
    except (FileNotFoundError, ValueError):
        return ["*"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Built browser client, served last so API routes win
_static_dir = get_settings().static_dir
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")
