# minigram/ai/router.py
from fastapi import APIRouter, Depends

from minigram.ai import service as ai_svc
from minigram.ai.client import GenerativeTextClient, get_ai_client
from minigram.ai.schemas import (
    CaptionOut,
    CaptionRequest,
    HashtagsOut,
    HashtagsRequest,
    SuggestionsOut,
    SuggestionsRequest,
)
from minigram.core.json import UTF8JSONResponse, ok
from minigram.users.deps import get_current_user

# todas protegidas
router = APIRouter(
    prefix="/api/ai",
    tags=["ai"],
    default_response_class=UTF8JSONResponse,
    dependencies=[Depends(get_current_user)],
)


@router.post("/generate-caption", response_model=CaptionOut)
async def generate_caption(
    payload: CaptionRequest,
    client: GenerativeTextClient = Depends(get_ai_client),
):
    caption = await ai_svc.generate_caption(client, payload.image_description, payload.base64_image)
    return ok("Caption generated successfully", caption=caption)


@router.post("/generate-suggestions", response_model=SuggestionsOut)
async def generate_suggestions(
    payload: SuggestionsRequest,
    client: GenerativeTextClient = Depends(get_ai_client),
):
    suggestions = await ai_svc.generate_suggestions(client, payload.image_description)
    return ok("Caption suggestions generated successfully", suggestions=suggestions)


@router.post("/generate-hashtags", response_model=HashtagsOut)
async def generate_hashtags(
    payload: HashtagsRequest,
    client: GenerativeTextClient = Depends(get_ai_client),
):
    hashtags = await ai_svc.generate_hashtags(client, payload.caption)
    return ok("Hashtags generated successfully", hashtags=hashtags)
