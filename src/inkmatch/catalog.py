"""
catalog.py - Static tattoo catalog

Style, tone, size, color and placement tables shared by the translator and
the tool handlers. Style order is the display order of the catalog tool.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StyleInfo:
    """One tattoo style entry."""

    key: str
    name: str
    description: str
    keywords: str


_STYLES = (
    StyleInfo(
        "traditional",
        "Traditional / Old School",
        "Bold black outlines, limited color palette, iconic imagery like anchors, roses, eagles",
        "bold lines, saturated colors, classic americana, sailor jerry",
    ),
    StyleInfo(
        "neo_traditional",
        "Neo-Traditional",
        "Evolution of traditional with more colors, detail, and artistic freedom",
        "ornate, decorative, rich colors, art nouveau influence",
    ),
    StyleInfo(
        "realism",
        "Realism",
        "Photorealistic portraits, nature, or objects with incredible detail",
        "photorealistic, portraits, detailed shading, lifelike",
    ),
    StyleInfo(
        "watercolor",
        "Watercolor",
        "Fluid, painterly style with color splashes and soft edges",
        "splashes, drips, soft edges, artistic, flowing",
    ),
    StyleInfo(
        "geometric",
        "Geometric",
        "Precise shapes, patterns, and mathematical designs",
        "sacred geometry, mandalas, patterns, symmetry, dotwork",
    ),
    StyleInfo(
        "minimalist",
        "Minimalist",
        "Simple, clean lines with minimal detail - less is more",
        "fine line, simple, delicate, small, subtle",
    ),
    StyleInfo(
        "japanese",
        "Japanese / Irezumi",
        "Traditional Japanese imagery: koi, dragons, waves, cherry blossoms",
        "irezumi, waves, koi fish, dragons, cherry blossoms, full sleeves",
    ),
    StyleInfo(
        "blackwork",
        "Blackwork",
        "Bold black ink only - tribal, ornamental, or illustrative",
        "solid black, tribal, ornamental, bold, graphic",
    ),
    StyleInfo(
        "dotwork",
        "Dotwork",
        "Images created entirely from dots, often geometric or mandala designs",
        "stippling, pointillism, mandalas, gradients from dots",
    ),
    StyleInfo(
        "illustrative",
        "Illustrative",
        "Like illustrations from books - can range from whimsical to dark",
        "storybook, artistic, sketch-like, creative",
    ),
    StyleInfo(
        "sketch",
        "Sketch / Brushstroke",
        "Looks like pencil sketches or brush paintings, intentionally unfinished",
        "raw, artistic, brushstrokes, sketch marks visible",
    ),
    StyleInfo(
        "biomechanical",
        "Biomechanical",
        "Fusion of organic and mechanical - skin peeled back to reveal machinery",
        "mechanical, organic, giger, futuristic, 3D effect",
    ),
)

TATTOO_STYLES: dict[str, StyleInfo] = {style.key: style for style in _STYLES}

DEFAULT_STYLE = "minimalist"

EMOTIONAL_TONES = ("dark", "soft", "bold", "peaceful", "playful", "raw", "elegant", "fierce")

SIZES = ("tiny", "small", "medium", "large", "extra large")

COLOR_PREFERENCES = ("black_and_gray", "full_color", "limited_palette")

DEFAULT_COLOR_PREFERENCE = "black_and_gray"

# Placement -> body location phrase used in the image prompt
PLACEMENT_PHRASES: dict[str, str] = {
    "forearm": "on inner forearm",
    "upper arm": "on upper arm",
    "shoulder": "on shoulder",
    "back": "on back",
    "chest": "on chest",
    "ribs": "on ribcage",
    "leg": "on leg",
    "thigh": "on thigh",
    "calf": "on calf",
    "ankle": "on ankle",
    "wrist": "on wrist",
    "hand": "on hand",
    "neck": "on neck",
    "behind ear": "behind ear",
}

DEFAULT_PLACEMENT_PHRASE = "on skin"


def get_style(key: str | None) -> StyleInfo:
    """Look up a style, falling back to the default style for unknown keys."""
    return TATTOO_STYLES.get(key or "", TATTOO_STYLES[DEFAULT_STYLE])


__all__ = [
    "COLOR_PREFERENCES",
    "DEFAULT_COLOR_PREFERENCE",
    "DEFAULT_PLACEMENT_PHRASE",
    "DEFAULT_STYLE",
    "EMOTIONAL_TONES",
    "PLACEMENT_PHRASES",
    "SIZES",
    "StyleInfo",
    "TATTOO_STYLES",
    "get_style",
]
