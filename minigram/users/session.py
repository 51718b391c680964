# minigram/users/session.py
"""
Sesión por cookie.

- issue_session: firma un JWT con el id del usuario y lo deja en la cookie
- resolve_session: token → User, o Unauthenticated
- clear_session: borra la cookie

Cualquier fallo de verificación (token roto, firma inválida, expirado,
usuario borrado) sale con el MISMO mensaje: el cliente no puede distinguir
"expirado" de "inválido".
"""
from fastapi import Response
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from minigram.core.config import settings
from minigram.core.errors import Unauthenticated
from minigram.core.security import create_access_token, decode_access_token
from minigram.users.models import User
from minigram.users.repository import get_by_id

INVALID_SESSION = "Invalid token please login again"


def _cookie_params() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict",
        "path": "/",
    }


def issue_session(response: Response, user_id: int) -> str:
    token = create_access_token(user_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MIN * 60,
        **_cookie_params(),
    )
    return token


def clear_session(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, **_cookie_params())


async def resolve_session(db: AsyncSession, token: str | None) -> User:
    if not token:
        raise Unauthenticated()

    try:
        user_id = decode_access_token(token)
    except JWTError:
        raise Unauthenticated(INVALID_SESSION)

    user = await get_by_id(db, user_id)
    if not user:
        raise Unauthenticated(INVALID_SESSION)
    return user
