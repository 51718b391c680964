# minigram/users/router.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from minigram.core.json import UTF8JSONResponse, ok
from minigram.core.schemas import Envelope
from minigram.db.session import get_session
from minigram.users import service as svc
from minigram.users.deps import get_current_user
from minigram.users.models import User
from minigram.users.schemas import UserCreate, UserLogin, ProfileUpdate, UserEnvelope
from minigram.users.session import issue_session, clear_session

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    default_response_class=UTF8JSONResponse,
)


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_session),
):
    user = await svc.register_user(db, payload)
    await db.commit()

    issue_session(response, user.id)
    return ok("User registered successfully", user=await svc.hydrate_user_out(db, user))


@router.post("/login", response_model=UserEnvelope)
async def login(
    payload: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_session),
):
    user = await svc.login_user(db, payload.email, payload.password)

    issue_session(response, user.id)
    return ok("Logged in successfully", user=await svc.hydrate_user_out(db, user))


@router.post("/logout", response_model=Envelope)
async def logout(response: Response):
    clear_session(response)
    return ok("Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
async def me(
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return ok("User fetched successfully", user=await svc.hydrate_user_out(db, current))


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    payload: ProfileUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user = await svc.update_profile(db, current, payload)
    await db.commit()
    return ok("Profile updated successfully", user=await svc.hydrate_user_out(db, user))


@router.post("/follow/{user_id}", response_model=UserEnvelope)
async def follow(
    user_id: int,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await svc.follow_user(db, current, user_id)
    await db.commit()
    return ok("User followed successfully", user=await svc.hydrate_user_out(db, current))


@router.delete("/unfollow/{user_id}", response_model=UserEnvelope)
async def unfollow(
    user_id: int,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await svc.unfollow_user(db, current, user_id)
    await db.commit()
    return ok("User unfollowed successfully", user=await svc.hydrate_user_out(db, current))


@router.get("/user/{username}", response_model=UserEnvelope)
async def user_by_username(
    username: str,
    db: AsyncSession = Depends(get_session),
):
    user = await svc.get_public_user(db, username)
    return ok(user=await svc.hydrate_user_out(db, user))
