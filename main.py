import argparse
import base64
import sys
from pathlib import Path

import requests

from backend.generation_service import GenerationService
from backend.publish_service import PublishService
from core.config import get_default_caption, load_settings, validate_settings
from core.errors import AtelierError
from core.schemas import PublishRequest
from core.styles import STYLE_PRESETS


def main():
    """Main entry point for one-shot figure study generation."""
    parser = argparse.ArgumentParser(
        description="Generate an AI figure study and optionally publish it to Instagram"
    )
    parser.add_argument(
        "prompt",
        type=str,
        help="Description of the figure study you want to create",
    )
    parser.add_argument(
        "--style",
        "-s",
        choices=sorted(STYLE_PRESETS),
        default=None,
        help="Style preset appended to the prompt",
    )
    parser.add_argument("--negative-prompt", "-n", default="", help="What to avoid")
    parser.add_argument("--aspect-ratio", "-a", default="1:1", help="Aspect ratio (default: 1:1)")
    parser.add_argument("--guidance", "-g", type=float, default=7.5, help="Guidance 1-20 (default: 7.5)")
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="output/study.png",
        help="Output path for the generated PNG (default: output/study.png)",
    )
    parser.add_argument("--publish", action="store_true", help="Publish to Instagram after generating")
    parser.add_argument("--caption", default=get_default_caption(), help="Caption used with --publish")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail before doing anything if any credential is missing",
    )

    args = parser.parse_args()

    settings = load_settings()
    session = requests.Session()

    try:
        if args.strict:
            validate_settings(settings)

        generation = GenerationService.from_settings(settings, session)
        print(f"Generating figure study: {args.prompt}")
        request = generation.prepare(
            prompt=args.prompt,
            negative_prompt=args.negative_prompt,
            aspect_ratio=args.aspect_ratio,
            style=args.style,
            guidance=args.guidance,
        )
        result = generation.generate(request)
    except AtelierError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(base64.b64decode(result.base64_image))
    print(f"Image saved to: {output_path.resolve()}")

    if not args.publish:
        return

    print("Publishing to Instagram...")
    try:
        published = PublishService.from_settings(settings, session).publish(
            PublishRequest(
                image_data=result.base64_image,
                caption=args.caption,
                prompt=args.prompt,
                style=args.style,
            )
        )
    except AtelierError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.image_url:
            print(f"The image is still hosted at: {e.image_url}", file=sys.stderr)
        sys.exit(1)

    print()
    print(f"Success! Published media {published.publish_id}")
    print(f"Container: {published.container_id}")
    print(f"Image URL: {published.image_url}")


if __name__ == "__main__":
    main()
