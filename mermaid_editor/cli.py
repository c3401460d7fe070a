"""Command-line interface."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import print_config
from .credentials import CredentialStore, apply_settings_input
from .errors import DiagramError
from .exporter import ExportService
from .models import RenderResult, RenderState
from .session import EditorSession


def _print_result(result: RenderResult):
    if result.state == RenderState.SUCCESS:
        print(f"Preview ready ({len(result.artifact.svg)} bytes of SVG).")
    elif result.state == RenderState.ERROR:
        print(f"Preview: {result.error}")
    elif result.state == RenderState.IDLE:
        print("Preview: empty.")


def _print_error(error: DiagramError):
    print(f"{error.title}: {error.message}")


def _read_source() -> str:
    """Read multi-line source until a lone '.'."""
    print("Enter Mermaid code, finish with a line containing only '.':")
    lines = []
    while True:
        line = input()
        if line.strip() == ".":
            break
        lines.append(line)
    return "\n".join(lines)


async def run_interactive(output_dir: str):
    """Run an interactive editing session."""
    print("=" * 60)
    print("mermaid-editor - describe a diagram, get Mermaid")
    print("=" * 60)
    store = CredentialStore()
    print_config(api_key_set=store.is_set())
    print("\nDescribe your diagram. Commands: show, edit, render, export, key, quit\n")

    session = EditorSession(store=store, exporter=ExportService(output_dir))
    try:
        while True:
            try:
                user_input = input("\nYou: ").strip()
            except (EOFError, KeyboardInterrupt):
                break

            if not user_input:
                continue
            command = user_input.lower()
            if command == "quit":
                break
            if command == "show":
                print(session.source or "(empty)")
                continue
            if command == "edit":
                try:
                    source = _read_source()
                except (EOFError, KeyboardInterrupt):
                    continue
                _print_result(await session.update_source(source))
                continue
            if command == "render":
                print("Loading Mermaid renderer...")
                _print_result(await session.refresh())
                continue
            if command == "export":
                try:
                    path = session.export()
                except DiagramError as e:
                    _print_error(e)
                    continue
                if path:
                    print(f"Download Complete: {path}")
                else:
                    print("Nothing to export yet.")
                continue
            if command == "key":
                print(f"API Key: {store.masked() or 'NOT SET'}")
                continue

            print("Generating...")
            try:
                result = await session.generate(user_input)
            except DiagramError as e:
                _print_error(e)
                continue
            print("Diagram Generated")
            print(session.source)
            _print_result(result)
    finally:
        await session.renderer.loader.close()


async def run_once(prompt: Optional[str], source_path: Optional[str], output_dir: str) -> dict:
    """Generate (or load) one diagram, render it and export it.

    Returns a results dict.
    """
    session = EditorSession(exporter=ExportService(output_dir))
    results = {
        "prompt": prompt,
        "source": None,
        "state": None,
        "svg_path": None,
        "errors": [],
        "success": False,
    }
    try:
        if prompt is not None:
            result = await session.generate(prompt)
        else:
            result = await session.update_source(Path(source_path).read_text(encoding="utf-8"))
        results["source"] = session.source
        results["state"] = result.state.value
        if result.state == RenderState.ERROR:
            results["errors"].append(result.error)
        path = session.export()
        if path:
            results["svg_path"] = str(path)
            results["success"] = True
    except DiagramError as e:
        results["errors"].append(f"{e.title}: {e.message}")
    finally:
        await session.renderer.loader.close()
    return results


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="mermaid-editor",
        description="Generate, render and export Mermaid diagrams from natural language"
    )
    parser.add_argument("--prompt", "-p", type=str, help="Describe the diagram to generate")
    parser.add_argument("--file", "-f", type=str, metavar="DIAGRAM.mmd",
                        help="Render an existing Mermaid file instead of generating")
    parser.add_argument("--output", "-o", type=str, default="./output",
                        help="Output directory for diagram.svg")
    parser.add_argument("--json", action="store_true", help="Output results as JSON")
    parser.add_argument("--set-key", type=str, metavar="KEY", help="Save the OpenAI API key")
    parser.add_argument("--clear-key", action="store_true", help="Remove the saved API key")
    parser.add_argument("--show-key", action="store_true", help="Show the saved API key, masked")
    parser.add_argument("--config", "-c", action="store_true", help="Show config and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.set_key is not None or args.clear_key or args.show_key:
        store = CredentialStore()
        if args.clear_key:
            apply_settings_input(store, "")
            print("API Key Cleared")
        elif args.set_key is not None:
            outcome = apply_settings_input(store, args.set_key)
            print({
                "saved": "Settings Saved",
                "cleared": "API Key Cleared",
                "unchanged": "API Key Unchanged",
            }[outcome])
        print(f"API Key: {store.masked() or 'NOT SET'}")
        return

    if args.config:
        print_config(api_key_set=CredentialStore().is_set())
        return

    if args.prompt is not None or args.file:
        if args.file and not Path(args.file).exists():
            print(f"Error: Diagram file not found: {args.file}", file=sys.stderr)
            sys.exit(1)

        results = asyncio.run(run_once(args.prompt, args.file, args.output))
        if args.json:
            print(json.dumps(results, indent=2))
        else:
            if results["source"]:
                print(results["source"])
            if results["svg_path"]:
                print(f"Diagram: {results['svg_path']}")
            if results["errors"]:
                print(f"Errors: {results['errors']}")
        sys.exit(0 if results["success"] else 1)

    asyncio.run(run_interactive(args.output))


if __name__ == "__main__":
    main()
