import logging
from minigram.db.session import Database

# 👇 importa todos los modelos que deben existir en la DB
from minigram.users.models import User, Follow  # noqa: F401
from minigram.posts.models import Post, PostTag, PostLike, Comment  # noqa: F401

log = logging.getLogger("uvicorn")


async def init_models(database: Database) -> None:
    """
    Crea/verifica todas las tablas declaradas en Base.metadata.
    """
    try:
        await database.create_all()
        log.info("✅ DB init: tablas creadas/verificadas.")
    except Exception as e:
        log.error(f"❌ DB init falló: {e!r}")
        raise
