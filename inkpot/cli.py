from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .config import Layout, Settings, load_config
from .content import ContentKind
from .errors import SiteError
from .pages import render_site
from .scaffold import create_item, create_site
from .server import serve
from .site import collect


def load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_mapping(load_config(Path(args.config)))
    if getattr(args, "input", None):
        settings.in_dir = args.input
    if getattr(args, "output", None):
        settings.out_dir = args.output
    if getattr(args, "force", None) is not None:
        settings.force = args.force
    if getattr(args, "port", None):
        settings.port = args.port
    return settings


def cmd_init(args: argparse.Namespace) -> None:
    directory = Path(args.dir)
    create_site(directory, force=args.force)
    print(f"Site initialized in: {directory}")


def cmd_new(args: argparse.Namespace) -> None:
    # Only the command-line flag may overwrite an existing source file.
    settings = Settings.from_mapping(load_config(Path(args.config)))
    kind = ContentKind.PAGE if args.page else ContentKind.ARTICLE
    path = create_item(settings, args.name, kind=kind, force=args.force)
    print(f"Created {path}")


def cmd_gen(args: argparse.Namespace) -> None:
    settings = load_settings(args)
    start = time.perf_counter()
    site = collect(settings, Layout())
    render_site(site, Path(settings.out_dir), settings.force)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {settings.out_dir}")


def cmd_serve(args: argparse.Namespace) -> None:
    settings = load_settings(args)
    serve(Path(settings.out_dir), settings.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Static site generator for markdown articles and pages.")
    parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Initialize an empty site.")
    init_parser.add_argument("dir", nargs="?", default=".", help="Directory for the site.")
    init_parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing site files.")
    init_parser.set_defaults(handler=cmd_init)

    new_parser = subparsers.add_parser("new", help="Create a new article or page.")
    new_parser.add_argument("name", help="Title of the item; its link is derived from it.")
    new_parser.add_argument("--page", action="store_true", help="Create a page instead of an article.")
    new_parser.add_argument("-f", "--force", action="store_true", help="Overwrite an existing source file.")
    new_parser.set_defaults(handler=cmd_new)

    gen_parser = subparsers.add_parser("gen", help="Generate the site.")
    gen_parser.add_argument("--input", help="Site directory holding sources and templates.")
    gen_parser.add_argument("--output", help="Output directory for the site.")
    gen_parser.add_argument(
        "--force",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Overwrite existing output files.",
    )
    gen_parser.set_defaults(handler=cmd_gen)

    serve_parser = subparsers.add_parser("serve", help="Serve the generated site locally.")
    serve_parser.add_argument("--output", help="Directory to serve.")
    serve_parser.add_argument("--port", type=int, help="Port to listen on.")
    serve_parser.set_defaults(handler=cmd_serve)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        args.handler(args)
    except SiteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0
