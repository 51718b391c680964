# minigram/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from minigram.core.json import UTF8JSONResponse
from minigram.core.config import settings
from minigram.core.errors import register_error_handlers
from minigram.db.init_db import init_models
from minigram.db.session import Database

# routers
from minigram.users.router import router as auth_router
from minigram.posts.router import router as posts_router
from minigram.ai.router import router as ai_router

log = logging.getLogger("uvicorn")


def create_app(database: Database | None = None) -> FastAPI:
    """
    Arma la app. Si llega `database` (tests), se usa ese handle y el
    lifespan no crea otro.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("🚀 Iniciando servicio…")
        owned = getattr(app.state, "db", None) is None
        if owned:
            app.state.db = Database(settings.DATABASE_URL)
        await init_models(app.state.db)
        log.info("✅ Startup listo.")
        yield
        if owned:
            await app.state.db.dispose()
            app.state.db = None
        log.info("👋 Servicio detenido.")

    app = FastAPI(
        title="MiniGram API",
        default_response_class=UTF8JSONResponse,
        lifespan=lifespan,
    )
    app.state.db = database

    # CORS (con credenciales: la sesión va en cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/api/health")
    async def health(request: Request):
        db: Database = request.app.state.db
        try:
            async with db.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            database_status = "healthy"
        except Exception as e:
            log.error(f"❌ health: DB no responde: {e!r}")
            database_status = "unhealthy"
        return {"ok": database_status == "healthy", "database": database_status}

    app.include_router(auth_router)   # /api/auth/...
    app.include_router(posts_router)  # /api/posts/...
    app.include_router(ai_router)     # /api/ai/...
    return app


app = create_app()
