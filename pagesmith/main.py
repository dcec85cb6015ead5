"""Command line front end for building and exporting a page."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .assistant import ContentType, assistant_from_settings, default_content_type
from .core.generator import build_bundle, write_archive, write_site
from .core.registry import ALL_CATEGORIES, BlockRegistry, default_registry
from .core.state import Direction, Outcome, PageStore
from .core.storage import JsonFileStore
from .errors import UnknownTemplate
from .settings import LOG_LEVEL_ENV, SettingsManager, state_dir


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pagesmith", description="Compose and export landing pages.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    blocks = sub.add_parser("blocks", help="List the block library.")
    blocks.add_argument("--category", default=ALL_CATEGORIES)
    blocks.add_argument("--search", default="")

    sub.add_parser("show", help="Show the blocks on the page.")

    add = sub.add_parser("add", help="Append a block to the page.")
    add.add_argument("template_id")

    edit = sub.add_parser("edit", help="Set the text of a block field.")
    edit.add_argument("instance_id")
    edit.add_argument("selector")
    edit.add_argument("value")

    move = sub.add_parser("move", help="Move a block up or down.")
    move.add_argument("instance_id")
    move.add_argument("direction", choices=[d.value for d in Direction])

    delete = sub.add_parser("delete", help="Remove a block.")
    delete.add_argument("instance_id")

    title = sub.add_parser("title", help="Set the page title.")
    title.add_argument("title")

    export = sub.add_parser("export", help="Export the page as a zip (or a folder with --folder).")
    export.add_argument("output", nargs="?")
    export.add_argument("--folder", action="store_true")

    write = sub.add_parser("write", help="Ask the assistant for copy.")
    write.add_argument("prompt")
    write.add_argument("--type", dest="content_type", choices=[c.value for c in ContentType])
    write.add_argument("--block", dest="instance_id")
    write.add_argument("--field", dest="selector")

    improve = sub.add_parser("improve", help="Rewrite a block field with the assistant.")
    improve.add_argument("instance_id")
    improve.add_argument("selector")
    improve.add_argument("instructions")

    sub.add_parser("reset", help="Remove every block and the saved page.")
    return parser


def _print_blocks(registry: BlockRegistry, category: str, search: str) -> None:
    for template in registry.filter_templates(category, search):
        fields = ", ".join(f"{f.selector} ({f.label})" for f in template.editable_fields)
        print(f"{template.template_id:<16} {template.category:<8} {template.name}")
        if fields:
            print(f"{'':<16} fields: {fields}")


def _print_page(store: PageStore) -> None:
    print(f"Title: {store.title}")
    if not len(store):
        print("(no blocks)")
    for position, block in enumerate(store, start=1):
        template = store.registry.find_template(block.template_id)
        name = template.name if template else "missing template"
        print(f"{position}. {block.instance_id}  {block.template_id} ({name})")
        for selector, value in block.content.items():
            print(f"     {selector}: {value}")


def _report(outcome: Outcome, instance_id: str) -> int:
    if outcome is Outcome.NOT_FOUND:
        print(f"No block {instance_id!r} on the page.", file=sys.stderr)
        return 1
    if outcome is Outcome.NOOP:
        print("Block is already at the edge of the page.")
    return 0


def run(args: argparse.Namespace, settings: SettingsManager) -> int:
    registry = default_registry()
    if args.command == "blocks":
        _print_blocks(registry, args.category, args.search)
        return 0

    persistence = JsonFileStore(state_dir())
    with PageStore(registry, persistence, key=settings.get("storage_key")) as store:
        if args.command == "show":
            _print_page(store)
        elif args.command == "add":
            try:
                print(store.add_block(args.template_id))
            except UnknownTemplate as exc:
                print(str(exc), file=sys.stderr)
                return 1
        elif args.command == "edit":
            return _report(store.update_block_content(args.instance_id, args.selector, args.value),
                           args.instance_id)
        elif args.command == "move":
            return _report(store.move_block(args.instance_id, args.direction), args.instance_id)
        elif args.command == "delete":
            return _report(store.delete_block(args.instance_id), args.instance_id)
        elif args.command == "title":
            store.set_title(args.title)
        elif args.command == "export":
            bundle = build_bundle(store.state, registry)
            output = args.output or settings.get("export_name")
            if args.folder:
                output = output[:-4] if output.endswith(".zip") else output
                write_site(bundle, output)
            else:
                write_archive(bundle, output)
            print(f"Exported to {os.path.abspath(output)}")
        elif args.command == "write":
            return _write(args, store, settings)
        elif args.command == "improve":
            block = store.get_block(args.instance_id)
            if block is None:
                return _report(Outcome.NOT_FOUND, args.instance_id)
            current = block.content.get(args.selector)
            if current is None and block.template_id in registry:
                current = registry.defaults_for(block.template_id).get(args.selector)
            assistant = assistant_from_settings(settings)
            text = assistant.improve(current or "", args.instructions)
            store.update_block_content(args.instance_id, args.selector, text)
            print(text)
        elif args.command == "reset":
            store.reset()
    return 0


def _write(args: argparse.Namespace, store: PageStore, settings: SettingsManager) -> int:
    category: Optional[str] = None
    if args.instance_id:
        block = store.get_block(args.instance_id)
        if block is None:
            return _report(Outcome.NOT_FOUND, args.instance_id)
        template = store.registry.find_template(block.template_id)
        category = template.category if template else None
    content_type = args.content_type or default_content_type(category).value
    context = {"block_category": category} if category else {}
    text = assistant_from_settings(settings).generate(args.prompt, content_type, context)
    if args.instance_id and args.selector:
        store.update_block_content(args.instance_id, args.selector, text)
    print(text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else getattr(
        logging, os.getenv(LOG_LEVEL_ENV, "WARNING").upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return run(args, SettingsManager())


if __name__ == "__main__":
    raise SystemExit(main())
