#!/usr/bin/env python3
"""Terminal-based CLI for Atelier Agent."""

from __future__ import annotations

import base64
import sys
from pathlib import Path

import requests

from core.config import (
    DEFAULT_OUTPUT_DIR,
    get_default_caption,
    get_default_negative_prompt,
    get_default_style,
    load_settings,
)
from core.errors import AtelierError
from core.schemas import HistoryEntry, PublishRequest
from core.styles import ASPECT_RATIOS, STYLE_PRESETS
from backend.generation_service import GenerationService
from backend.publish_service import PublishService


def print_header() -> None:
    """Print the CLI header."""
    print("\n" + "=" * 60)
    print("  🎨 Atelier Agent CLI")
    print("  AI figure studies, straight to Instagram")
    print("=" * 60)


def print_help() -> None:
    """Print available commands."""
    print("""
Available Commands:
  generate  - Generate a new figure study
  publish   - Publish the latest image to Instagram
  history   - List images generated in this session
  styles    - View available style presets
  help      - Show this help message
  exit      - Exit the application
  quit      - Exit the application
""")


def show_styles() -> None:
    """Display the style presets and aspect ratios."""
    print(f"\nStyle Presets ({len(STYLE_PRESETS)})")
    print("-" * 50)
    for i, preset in enumerate(STYLE_PRESETS.values(), 1):
        print(f"\n{i}. {preset.label} [{preset.key}]")
        print(f"   {preset.descriptor}")

    print("\nAspect Ratios: " + ", ".join(ASPECT_RATIOS.values()))


def show_history(history: list[HistoryEntry]) -> None:
    if not history:
        print("\nNo images generated yet.")
        return

    print(f"\nSession History ({len(history)} images, newest first)")
    print("-" * 50)
    for i, entry in enumerate(history, 1):
        print(f"{i}. {entry.created_at:%H:%M:%S} [{entry.style}] {entry.prompt[:60]}")


def ask(label: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"{label}{suffix}: ").strip()
    return value or default


def save_image(entry: HistoryEntry, output_dir: Path = DEFAULT_OUTPUT_DIR) -> Path:
    """Write a history entry to ``output_dir`` as PNG."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"study_{entry.created_at:%Y%m%d_%H%M%S}.png"
    path.write_bytes(base64.b64decode(entry.base64_image))
    return path


def generate_image(service: GenerationService, history: list[HistoryEntry]) -> None:
    """Collect art direction interactively and generate one image."""
    print("\n" + "-" * 40)
    print("Generate Figure Study")
    print("-" * 40)

    print("\nDescribe the figure study you want to create:")
    prompt = input("> ").strip()
    if not prompt:
        print("Error: Prompt is required.")
        return

    style = ask("Style preset", get_default_style())
    aspect_ratio = ask("Aspect ratio", "1:1")
    negative_prompt = ask("Negative prompt", get_default_negative_prompt())
    guidance_text = ask("Guidance (1-20)", "7.5")
    try:
        guidance = float(guidance_text)
    except ValueError:
        guidance = None

    print("\nGenerating...")
    try:
        request = service.prepare(
            prompt=prompt,
            negative_prompt=negative_prompt,
            aspect_ratio=aspect_ratio,
            style=style,
            guidance=guidance,
        )
        result = service.generate(request)
    except AtelierError as e:
        print(f"\nError generating image: {e.message}")
        return

    entry = HistoryEntry(base64_image=result.base64_image, prompt=prompt, style=style)
    history.insert(0, entry)
    path = save_image(entry)

    print(f"\nSaved: {path}")
    if result.model:
        print(f"Model: {result.model}")
    if result.inference_time:
        print(f"Inference Time: {result.inference_time:.2f}s")


def publish_latest(service: PublishService, history: list[HistoryEntry]) -> None:
    """Publish the most recent image of the session."""
    if not history:
        print("\nGenerate an image first.")
        return

    entry = history[0]
    caption = ask("\nCaption", get_default_caption())

    print("\nPublishing...")
    try:
        result = service.publish(
            PublishRequest(
                image_data=entry.base64_image,
                caption=caption,
                prompt=entry.prompt,
                style=entry.style,
            )
        )
    except AtelierError as e:
        print(f"\nError publishing image: {e.message}")
        if e.image_url:
            print(f"Hosted image: {e.image_url}")
        return

    print("\n" + "=" * 50)
    print("PUBLISHED SUCCESSFULLY")
    print("=" * 50)
    print(f"Image URL: {result.image_url}")
    print(f"Container: {result.container_id}")
    print(f"Media ID: {result.publish_id}")


def main() -> None:
    """Main CLI loop."""
    settings = load_settings()
    session = requests.Session()
    generation = GenerationService.from_settings(settings, session)
    publishing = PublishService.from_settings(settings, session)
    history: list[HistoryEntry] = []

    print_header()
    print_help()

    while True:
        try:
            command = input("\n🎨 atelier> ").strip().lower()

            if command in ("exit", "quit", "q"):
                print("\nGoodbye!")
                sys.exit(0)

            elif command in ("help", "h", "?"):
                print_help()

            elif command == "styles":
                show_styles()

            elif command == "history":
                show_history(history)

            elif command == "generate":
                generate_image(generation, history)

            elif command == "publish":
                publish_latest(publishing, history)

            elif command == "":
                continue

            else:
                print(f"Unknown command: {command}")
                print("Type 'help' for available commands.")

        except KeyboardInterrupt:
            print("\n\nInterrupted. Type 'exit' to quit.")
        except EOFError:
            print("\nGoodbye!")
            sys.exit(0)


if __name__ == "__main__":
    main()
