# minigram/users/deps.py
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from minigram.core.config import settings
from minigram.db.session import get_session
from minigram.users.models import User
from minigram.users.session import resolve_session


def _extract_token(request: Request, authorization: str | None) -> str | None:
    """
    Cookie primero (navegador); Authorization: Bearer como alternativa
    para clientes que no manejan cookies.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    return token or None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
    authorization: str | None = Header(None),
) -> User:
    """
    Guard de rutas protegidas. Si la sesión no resuelve, lanza
    Unauthenticated y el endpoint nunca se ejecuta.
    """
    token = _extract_token(request, authorization)
    return await resolve_session(db, token)
