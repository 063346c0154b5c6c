from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from todo_platform.core.config import settings
from todo_platform.core.database import IdentityBase, TodoBase, identity_engine, todo_engine
from todo_platform.core.errors import register_exception_handlers
from todo_platform.core.log_config import configure_logging
from todo_platform.api.routes import auth, todos

# Importing the models registers their tables on the matching metadata
from todo_platform.models import todo as _todo_model  # noqa: F401
from todo_platform.models import user as _user_model  # noqa: F401


def _build_app(service_name: str, title: str, router: APIRouter, metadata, engine: Engine) -> FastAPI:
    """
    Assemble one independently deployable service.

    The two services share nothing at runtime except SECRET_KEY.
    """
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables if they don't exist; use migrations in production
        metadata.create_all(bind=engine)
        yield

    app = FastAPI(title=title, version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {
            "status": "OK",
            "service": service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def create_identity_app() -> FastAPI:
    """Identity service: registration and login"""
    return _build_app("user-service", "Identity Service", auth.router, IdentityBase.metadata, identity_engine)


def create_todo_app() -> FastAPI:
    """Todo service: ownership-scoped todo CRUD behind bearer tokens"""
    return _build_app("todo-service", "Todo Service", todos.router, TodoBase.metadata, todo_engine)


identity_app = create_identity_app()
todo_app = create_todo_app()
