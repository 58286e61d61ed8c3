"""Style presets and generation parameter normalisation."""

from __future__ import annotations

import math

from core.schemas import StylePreset

DEFAULT_GUIDANCE = 7.5
MIN_GUIDANCE = 1.0
MAX_GUIDANCE = 20.0
DEFAULT_ASPECT_RATIO = "1:1"

STYLE_PRESETS: dict[str, StylePreset] = {
    preset.key: preset
    for preset in (
        StylePreset(
            key="figurative-ink",
            label="Figurative Ink",
            descriptor="intricate ink washes, elegant contour lines, subtle shading, gallery lighting",
        ),
        StylePreset(
            key="digital-watercolor",
            label="Digital Watercolor",
            descriptor="digital watercolor washes, translucent pigments, soft gradients, expressive strokes",
        ),
        StylePreset(
            key="hyperreal-brush",
            label="Hyperreal Brush",
            descriptor="hyperreal digital painting, finely detailed skin texture, cinematic lighting, depth of field",
        ),
        StylePreset(
            key="comic-neo",
            label="Comic Neo-Noir",
            descriptor="neo-noir comic rendering, bold inked shadows, halftone highlights, dramatic perspective",
        ),
        StylePreset(
            key="concept-art",
            label="Concept Art",
            descriptor="concept art matte painting, atmospheric depth, dynamic posing, professional artstation style",
        ),
    )
}

# Labels offered by the UI; the API forwards any string verbatim.
ASPECT_RATIOS: dict[str, str] = {
    "1:1": "Square (1:1)",
    "3:4": "Portrait (3:4)",
    "4:5": "Portrait (4:5)",
    "9:16": "Vertical (9:16)",
    "16:9": "Landscape (16:9)",
}


def apply_style(prompt: str, style: str | None) -> str:
    """Append the preset descriptor for ``style`` to ``prompt``.

    Unknown or empty keys leave the prompt untouched.
    """
    preset = STYLE_PRESETS.get(style) if style else None
    if preset is None:
        return prompt
    return f"{prompt}, {preset.descriptor}"


def normalize_guidance(value: float | None) -> float:
    """Default absent or non-finite guidance to 7.5 and clamp to [1, 20]."""
    if value is None or isinstance(value, bool):
        return DEFAULT_GUIDANCE
    try:
        guidance = float(value)
    except (TypeError, ValueError):
        return DEFAULT_GUIDANCE
    if not math.isfinite(guidance):
        return DEFAULT_GUIDANCE
    return max(MIN_GUIDANCE, min(MAX_GUIDANCE, guidance))


def normalize_aspect_ratio(value: str | None) -> str:
    return value or DEFAULT_ASPECT_RATIO
