"""
tattoo.py - InkMatch tools

- generate_tattoo_preview: image preview plus handoff URL (uses the generator)
- explore_tattoo_styles: catalog listing
- recommend_tattoo_style: heuristic style-family guidance for the model
"""

from __future__ import annotations

from typing import Any

from inkmatch.catalog import (
    COLOR_PREFERENCES,
    DEFAULT_COLOR_PREFERENCE,
    EMOTIONAL_TONES,
    SIZES,
    TATTOO_STYLES,
    get_style,
)
from inkmatch.config.logging import get_logger
from inkmatch.generation.service import ImageGenerator
from inkmatch.prompting import PreviewRequest, build_handoff_url, build_payload

from .registry import FieldSpec, ToolDescriptor, ToolRegistry, ToolResult

logger = get_logger("inkmatch.tools.tattoo")

WIDGET_URI = "ui://widget/inkmatch.html"

GENERATE_PREVIEW = "generate_tattoo_preview"
EXPLORE_STYLES = "explore_tattoo_styles"
RECOMMEND_STYLE = "recommend_tattoo_style"

UPSELL = "Like this direction? Get 5 full personalized designs for just $0.99 at InkMatch."

STYLE_MAPPINGS = (
    "- Clean/minimal aesthetic → Minimalist, Fine Line, Geometric",
    "- Bold/strong presence → Traditional, Blackwork, Japanese",
    "- Artistic/creative → Watercolor, Illustrative, Sketch",
    "- Nature/organic → Realism, Neo-Traditional, Japanese",
    "- Spiritual/symbolic → Geometric, Dotwork, Blackwork",
    "- Dark/edgy → Blackwork, Biomechanical, Dark Illustrative",
    "- Soft/feminine → Watercolor, Fine Line, Minimalist",
)

PREVIEW_FIELDS = (
    FieldSpec(
        "style",
        required=True,
        enum=tuple(TATTOO_STYLES),
        description="The tattoo style - ask user if not specified",
    ),
    FieldSpec("meaning", description="What the tattoo represents or symbolizes to the user"),
    FieldSpec("tone", enum=EMOTIONAL_TONES, description="The emotional feel of the design"),
    FieldSpec(
        "elements",
        description="Specific imagery or elements to include (flowers, animals, symbols, etc.)",
    ),
    FieldSpec("placement", description="Where on the body (arm, back, chest, etc.)"),
    FieldSpec("size", enum=SIZES, description="Approximate size of the tattoo"),
    FieldSpec(
        "color_preference",
        enum=COLOR_PREFERENCES,
        description="Color preference for the design",
    ),
)

RECOMMEND_FIELDS = (
    FieldSpec(
        "preferences",
        required=True,
        description="User's described preferences, aesthetic taste, or personality",
    ),
    FieldSpec("existing_tattoos", description="Description of tattoos they already have, if any"),
    FieldSpec("avoid", description="Styles or elements they want to avoid"),
)


def make_preview_handler(generator: ImageGenerator, *, inkmatch_url: str, model_version: str):
    """Bind the preview tool to an image generator and handoff base URL."""

    async def generate_tattoo_preview(arguments: dict[str, Any]) -> ToolResult:
        request = PreviewRequest.from_arguments(arguments)
        style = get_style(request.style)

        image_url = await generator.generate(build_payload(request, version=model_version))
        handoff_url = build_handoff_url(request, inkmatch_url)

        structured = {
            "style": style.name,
            "style_key": request.style,
            "meaning": request.meaning,
            "tone": request.tone,
            "elements": request.elements,
            "placement": request.placement,
            "size": request.size,
            "color_preference": request.color_preference or DEFAULT_COLOR_PREFERENCE,
            "image_url": image_url,
            "inkmatch_url": handoff_url,
            "generated": image_url is not None,
        }

        if image_url:
            summary = [f"Here's your {style.name} tattoo preview"]
            if request.meaning:
                summary.append(f'representing "{request.meaning}"')
            if request.tone:
                summary.append(f"with a {request.tone} feel")
            if request.placement:
                summary.append(f"designed for your {request.placement}")
            narration = f"{' '.join(summary)}. {UPSELL}"
        else:
            narration = (
                f"I've captured your preferences for a {style.name} design. "
                "Visit InkMatch to generate your personalized designs."
            )

        logger.info("Preview built", style=request.style, generated=image_url is not None)
        return ToolResult(narration=narration, structured=structured)

    return generate_tattoo_preview


async def explore_tattoo_styles(arguments: dict[str, Any]) -> ToolResult:
    style_list = "\n\n".join(f"**{info.name}**: {info.description}" for info in TATTOO_STYLES.values())
    return ToolResult(
        narration="\n".join(
            [
                "Here are the main tattoo styles to consider:\n",
                style_list,
                "\nWhich style resonates with you? Once you pick one (or a couple), "
                "I can generate a preview design using InkMatch.",
            ]
        )
    )


async def recommend_tattoo_style(arguments: dict[str, Any]) -> ToolResult:
    # Guidance only; the model writes the actual recommendation
    lines = [f'Based on the user\'s preferences: "{arguments["preferences"]}"']
    if arguments.get("existing_tattoos"):
        lines.append(f'\nExisting tattoos: "{arguments["existing_tattoos"]}"')
    if arguments.get("avoid"):
        lines.append(f'\nWants to avoid: "{arguments["avoid"]}"')
    lines.append("\n\nConsider these style mappings:")
    lines.extend(STYLE_MAPPINGS)
    lines.append("\nRecommend 2-3 styles that fit, explain why, then offer to generate a preview.")
    return ToolResult(narration="\n".join(lines))


def build_tool_registry(
    generator: ImageGenerator,
    *,
    inkmatch_url: str,
    model_version: str,
) -> ToolRegistry:
    """Create the registry holding the three InkMatch tools."""
    registry = ToolRegistry()

    registry.register(
        ToolDescriptor(
            name=GENERATE_PREVIEW,
            handler=make_preview_handler(
                generator, inkmatch_url=inkmatch_url, model_version=model_version
            ),
            fields=PREVIEW_FIELDS,
            title="Generate Tattoo Design Preview",
            description=(
                "Creates a personalized AI-generated tattoo design preview based on user preferences. "
                "Use this when users want to SEE tattoo design ideas - not just discuss styles. "
                "This generates an actual image, which ChatGPT cannot do natively. "
                "Ideal triggers: 'design a tattoo for me', 'show me tattoo ideas', "
                "'generate a tattoo design', 'I want to see what my tattoo could look like', "
                "'create a tattoo concept', 'help me visualize a tattoo'. "
                "After showing the preview, users can get 5 full designs for $0.99 at InkMatch."
            ),
            annotations={"readOnlyHint": False, "openWorldHint": True, "destructiveHint": False},
            meta={
                "openai/outputTemplate": WIDGET_URI,
                "openai/toolInvocation/invoking": "Creating your tattoo design preview…",
                "openai/toolInvocation/invoked": (
                    "Your preview is ready! See below for your personalized design."
                ),
            },
        )
    )

    registry.register(
        ToolDescriptor(
            name=EXPLORE_STYLES,
            handler=explore_tattoo_styles,
            title="Explore Tattoo Styles",
            description=(
                "Returns an overview of popular tattoo styles with descriptions. "
                "Use this when users are unsure what style they want or ask "
                "'what tattoo styles are there', 'help me pick a style', "
                "'what are the different types of tattoos'. "
                "After exploring, suggest using generate_tattoo_preview to see actual designs."
            ),
            annotations={"readOnlyHint": True, "openWorldHint": False, "destructiveHint": False},
        )
    )

    registry.register(
        ToolDescriptor(
            name=RECOMMEND_STYLE,
            handler=recommend_tattoo_style,
            fields=RECOMMEND_FIELDS,
            title="Recommend Tattoo Style",
            description=(
                "Suggests tattoo styles based on user's described preferences, personality, "
                "or existing tattoos. Use when user says 'what style would suit me', "
                "'I like clean/bold/artistic things', 'recommend a style based on...'. "
                "Returns style suggestions with reasoning."
            ),
            annotations={"readOnlyHint": True, "openWorldHint": False, "destructiveHint": False},
        )
    )

    return registry


__all__ = [
    "EXPLORE_STYLES",
    "GENERATE_PREVIEW",
    "RECOMMEND_STYLE",
    "WIDGET_URI",
    "build_tool_registry",
    "explore_tattoo_styles",
    "make_preview_handler",
    "recommend_tattoo_style",
]
