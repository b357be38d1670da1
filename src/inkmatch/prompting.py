"""
prompting.py - Tool input to job payload translation

Pure functions, no I/O. Every function is total over the declared input
shape of `generate_tattoo_preview`: unknown or omitted optional values fall
back to documented defaults instead of failing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict

from .catalog import DEFAULT_PLACEMENT_PHRASE, PLACEMENT_PHRASES, get_style

HANDOFF_REF = "chatgpt"

COLOR_INSTRUCTIONS = {
    "black_and_gray": "black and gray ink",
    "full_color": "vibrant full color ink",
}
DEFAULT_COLOR_INSTRUCTION = "limited color palette"

PHOTO_DIRECTIONS = (
    "professional tattoo photography,",
    "high quality editorial photo,",
    "natural lighting,",
    "sharp detail,",
    "beautiful composition",
)


class PreviewRequest(BaseModel):
    """Validated input of a preview generation."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    style: str
    meaning: str | None = None
    tone: str | None = None
    elements: str | None = None
    placement: str | None = None
    size: str | None = None
    color_preference: str | None = None

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> PreviewRequest:
        # Empty strings count as omitted
        return cls.model_validate({k: v for k, v in arguments.items() if v not in ("", None)})


def build_prompt(request: PreviewRequest) -> str:
    """Assemble the text-to-image prompt for a preview."""
    style = get_style(request.style)
    color = COLOR_INSTRUCTIONS.get(request.color_preference or "", DEFAULT_COLOR_INSTRUCTION)
    location = PLACEMENT_PHRASES.get(request.placement or "", DEFAULT_PLACEMENT_PHRASE)

    parts = [
        f"Beautiful {style.name} tattoo {location},",
        f"{request.tone or 'balanced'} mood,",
        f"representing {request.meaning}," if request.meaning else "",
        f"featuring {request.elements}," if request.elements else "",
        f"{color},",
        f"{style.keywords},",
        *PHOTO_DIRECTIONS,
    ]
    return " ".join(part for part in parts if part)


def build_payload(
    request: PreviewRequest,
    *,
    version: str,
) -> dict[str, Any]:
    """Build the prediction-creation body for the image model."""
    return {
        "version": version,
        "input": {
            "prompt": build_prompt(request),
            "num_outputs": 1,
            "aspect_ratio": "1:1",
            "output_format": "webp",
            "output_quality": 80,
        },
    }


def build_handoff_url(request: PreviewRequest, base_url: str) -> str:
    """Build the InkMatch URL that carries the user's preferences over."""
    query: list[tuple[str, str]] = [("ref", HANDOFF_REF)]
    for key, value in (
        ("style", request.style),
        ("meaning", request.meaning),
        ("tone", request.tone),
        ("placement", request.placement),
        ("size", request.size),
        ("color", request.color_preference),
    ):
        if value:
            query.append((key, value))

    scheme, netloc, path, _, fragment = urlsplit(base_url)
    return urlunsplit((scheme, netloc, path or "/", urlencode(query), fragment))


__all__ = [
    "HANDOFF_REF",
    "PreviewRequest",
    "build_handoff_url",
    "build_payload",
    "build_prompt",
]
