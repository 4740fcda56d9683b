from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from chatspace.server.db.engine import create_engine, create_session_factory
from chatspace.server.errors import register_exception_handlers
from chatspace.server.log import setup_logging
from chatspace.server.settings import get_settings
from chatspace.server.tokens import TiktokenCounter


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)

    _app.state.auth_token = settings.resolve_auth_token()
    if not settings.auth_token:
        logger.warning("No CHATSPACE_AUTH_TOKEN set -- generated token: {}", _app.state.auth_token)

    logger.info("Workspace service starting (host={}, port={})", settings.host, settings.port)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.token_counter = TiktokenCounter(settings.token_encoding)
    logger.info("Token counter: tiktoken (encoding={})", settings.token_encoding)

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_engine(settings.database_url)
        _app.state.db_engine = engine
        _app.state.db_session_factory = create_session_factory(engine)
        logger.info("PostgreSQL: connected (pool_size=5, max_overflow=10)")
    else:
        logger.warning("CHATSPACE_DATABASE_URL not set -- workspace endpoints will answer 503")

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Workspace service shutting down")

    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("PostgreSQL: disposed")


app = FastAPI(title="Chatspace Workspaces", lifespan=lifespan)
register_exception_handlers(app)

# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from chatspace.server.routers.chat import router as chat_router  # noqa: E402
from chatspace.server.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(workspaces_router)
api.include_router(chat_router)

app.include_router(api)
