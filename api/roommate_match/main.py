import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import ALLOWED_ORIGINS, DATABASE_URL, LOG_LEVEL, SEED_DEMO_DATA, STORE_BACKEND
from .database import init_db, make_session_factory
from .errors import RoommateError
from .routes import include_modular_routers
from .services.directory import ProfileDirectory
from .services.engine import InterestEngine
from .services.rate_limit import SlidingWindowLimiter
from .services.seeding import seed_demo_profiles
from .store import InMemoryStore, SqlStore, Store

logger = logging.getLogger(__name__)


def build_store(backend: str = STORE_BACKEND, database_url: str = DATABASE_URL) -> Store:
    if backend == "memory":
        return InMemoryStore()
    if backend == "sql":
        engine, session_factory = make_session_factory(database_url)
        init_db(engine)
        return SqlStore(session_factory)
    raise ValueError(f"Unknown STORE_BACKEND {backend!r}; expected 'memory' or 'sql'")


async def roommate_error_handler(request: Request, exc: RoommateError) -> JSONResponse:
    logger.debug("[API] %s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.kind})


def create_app(store: Store | None = None, seed_demo_data: bool = SEED_DEMO_DATA) -> FastAPI:
    app = FastAPI(title="Roommate Match API")
    include_modular_routers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RoommateError, roommate_error_handler)

    store = store if store is not None else build_store()
    app.state.store = store
    app.state.directory = ProfileDirectory(store)
    app.state.engine = InterestEngine(store, app.state.directory)
    app.state.rate_limiter = SlidingWindowLimiter()

    @app.on_event("startup")
    def on_startup() -> None:
        logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
        logger.info("[STARTUP] store=%s seed_demo_data=%s", type(store).__name__, seed_demo_data)
        if seed_demo_data:
            seed_demo_profiles(app.state.directory, app.state.engine)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
