# minigram/ai/schemas.py
from minigram.core.schemas import CamelModel, Envelope


class CaptionRequest(CamelModel):
    image_description: str | None = None
    base64_image: str | None = None


class SuggestionsRequest(CamelModel):
    image_description: str | None = None


class HashtagsRequest(CamelModel):
    caption: str | None = None


class CaptionOut(Envelope):
    caption: str


class SuggestionsOut(Envelope):
    suggestions: list[str]


class HashtagsOut(Envelope):
    hashtags: list[str]
