# main.py

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from okchef.controller import WalkthroughController
from okchef.core.config import Config
from okchef.core.logger import setup_logging
from okchef.core.recipes import RecipeLibrary


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Voice-style recipe walkthrough. Each input line is one settled utterance.",
    )
    parser.add_argument("--config", default="config.json", help="Path to config.json.")
    parser.add_argument("--recipe", default="0", help="Recipe index or title.")
    parser.add_argument("--list", action="store_true", help="List recipes and exit.")
    parser.add_argument("--no-refresh", action="store_true", help="Do not fetch the remote pattern feed.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    config = Config(args.config)
    setup_logging(
        Path(config.logs_path),
        level=config.log_level,
        log_file=config.log_file,
        quiet=config.get("logging.quiet", []),
    )
    library = RecipeLibrary(Path(config.recipes_path))

    if args.list:
        for i, recipe in enumerate(library.list_recipes()):
            print(f"{i}: {recipe.title} ({recipe.step_count} steps)")
        return 0

    if args.recipe.isdigit():
        index = int(args.recipe)
        recipe = library[index] if index < len(library) else None
    else:
        recipe = library.get(args.recipe)
    if recipe is None:
        print(f"Unknown recipe: {args.recipe}", file=sys.stderr)
        return 2

    controller = WalkthroughController(recipe, config=config, sink=lambda text: print(f">> {text}"))
    controller.start(refresh=not args.no_refresh)

    try:
        for line in sys.stdin:
            line = line.strip()
            if not line:
                continue
            controller.handle_sentence(line)
            controller.speaker.wait_until_idle(timeout=5.0)
    except KeyboardInterrupt:
        pass
    finally:
        controller.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
