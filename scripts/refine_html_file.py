#!/usr/bin/env python3
"""Refine a saved HTML page from the command line.

    python scripts/refine_html_file.py site.html -r "make the header blue" -r "add a cat photo"
"""
import argparse
import asyncio
import logging
import os
import sys

# Allow running from a checkout without installing the project
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import GeneratorSettings
from errors import GenerationFailure
from model_client import LangChainModelClient
from refine import RefinementRequest, refine_website
from suggestions import suggest_improvements

logger = logging.getLogger("refine-html-file")


def build_parser():
    parser = argparse.ArgumentParser(description="Apply natural-language changes to a generated HTML page.")
    parser.add_argument("html_file", help="HTML file to refine")
    parser.add_argument("-r", "--request", action="append", default=[],
                        help="change to apply; repeat to combine several")
    parser.add_argument("-o", "--output", help="where to write the result (default: <name>_refined.html)")
    parser.add_argument("--suggest", action="store_true", help="print outstanding improvement tasks afterwards")
    return parser


def default_output_path(html_file: str) -> str:
    root, ext = os.path.splitext(html_file)
    return f"{root}_refined{ext or '.html'}"


async def _run(args, client, settings):
    with open(args.html_file, "r", encoding="utf-8") as f:
        original_html = f.read()

    combined = ". ".join(r.strip() for r in args.request if r.strip())
    result = await refine_website(RefinementRequest(html_content=original_html, request=combined), client, settings)

    output_file = args.output or default_output_path(args.html_file)
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(result.refined_html_content)
    print(f"Refined HTML saved to: {output_file}")

    if args.suggest:
        tasks = await suggest_improvements(client, result.refined_html_content)
        print("\nSuggested next steps:")
        for task in tasks:
            print(f"- [{task.id}] {task.description}")


def main(argv=None, client=None) -> int:
    args = build_parser().parse_args(argv)
    settings = GeneratorSettings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    if not any(r.strip() for r in args.request):
        print("Error: at least one non-empty --request is required", file=sys.stderr)
        return 2
    if not os.path.exists(args.html_file):
        print(f"Error: could not find {args.html_file}", file=sys.stderr)
        return 2

    client = client or LangChainModelClient(settings)
    try:
        asyncio.run(_run(args, client, settings))
    except GenerationFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
