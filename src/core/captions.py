"""Caption composition for published posts."""

from __future__ import annotations

DEFAULT_HASHTAGS = "#aiart #figuredrawing #digitalart #agentic"


def compose_caption(
    caption: str | None = None,
    prompt: str | None = None,
    style: str | None = None,
    hashtags: str = DEFAULT_HASHTAGS,
) -> str:
    """Build the final post caption.

    Segments are the trimmed user caption, a ``Prompt:`` line, a ``Style:``
    line and the hashtag line. Empty segments are dropped and the rest are
    separated by a blank line. The hashtag line is always present.
    """
    segments = [
        (caption or "").strip(),
        f"Prompt: {prompt}" if prompt else "",
        f"Style: {style}" if style else "",
        hashtags,
    ]
    return "\n\n".join(segment for segment in segments if segment)
