# minigram/ai/service.py
from __future__ import annotations

import re

from minigram.ai.client import GenerativeTextClient
from minigram.core.errors import ValidationError

_NUMBERING = re.compile(r"^\s*\d+\s*[.)]\s*")


def caption_prompt(description: str) -> str:
    return (
        "Generate a creative, engaging Instagram caption for an image with the "
        f'following description: "{description}".\n'
        "The caption should:\n"
        "- Be catchy and engaging\n"
        "- Include relevant hashtags (2-5)\n"
        "- Be appropriate for social media\n"
        "- Be 50-150 characters including hashtags\n"
        "Return only the caption, nothing else."
    )


def suggestions_prompt(description: str) -> str:
    return (
        "Generate 3 different creative and engaging Instagram captions for an image "
        f'with the following description: "{description}".\n'
        "Each caption should:\n"
        "- Be catchy and engaging\n"
        "- Include relevant hashtags (2-3)\n"
        "- Be appropriate for social media\n"
        "- Be unique and different from each other\n"
        "Format the response as a numbered list (1. Caption, 2. Caption, 3. Caption). "
        "Return only the captions, nothing else."
    )


def hashtags_prompt(caption: str) -> str:
    return (
        "Based on this Instagram caption, generate 10-15 relevant hashtags that would "
        f'help increase visibility:\n"{caption}"\n'
        "Return only the hashtags separated by spaces, starting with # "
        "(e.g., #hashtag1 #hashtag2). No numbering or other text."
    )


def parse_numbered_list(text: str) -> list[str]:
    """'1. foo\\n2) bar\\n\\n' → ['foo', 'bar']"""
    out: list[str] = []
    for line in text.splitlines():
        item = _NUMBERING.sub("", line).strip()
        if item:
            out.append(item)
    return out


def parse_hashtags(text: str) -> list[str]:
    """Tokens que empiezan por '#', en minúsculas y sin repetir."""
    out: list[str] = []
    for token in text.split():
        tag = token.lower()
        if tag.startswith("#") and len(tag) > 1 and tag not in out:
            out.append(tag)
    return out


def _require(value: str | None, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(message)
    return value


async def generate_caption(
    client: GenerativeTextClient,
    description: str | None,
    base64_image: str | None = None,
) -> str:
    description = _require(description, "Image description is required")
    text = await client.generate(caption_prompt(description), base64_image)
    return text.strip()


async def generate_suggestions(client: GenerativeTextClient, description: str | None) -> list[str]:
    description = _require(description, "Image description is required")
    text = await client.generate(suggestions_prompt(description))
    return parse_numbered_list(text)


async def generate_hashtags(client: GenerativeTextClient, caption: str | None) -> list[str]:
    caption = _require(caption, "Caption is required")
    text = await client.generate(hashtags_prompt(caption))
    return parse_hashtags(text)
