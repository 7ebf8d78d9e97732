from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import fields
from pathlib import Path
from typing import Optional

from jinja2 import TemplateError

from .config import DEFAULT_CONFIG, SiteConfig, load_config, parse_bool
from .errors import WebgenError
from .log import log_error, setup_logger
from .posts import process_posts_dir
from .render import preview_draft, render_content, render_markdown
from .walk import is_content, is_markdown, process_content_dir, process_markdown_dir, walk_directories

# Post aggregation writes the summary .content file that the later passes pick up.
PASSES = (process_posts_dir, process_markdown_dir, process_content_dir)


def build_site(root: Path, config: SiteConfig, log: logging.Logger) -> None:
    for process in PASSES:
        walk_directories(root, process, config, log)


def render_file(path: Path, config: SiteConfig, log: logging.Logger) -> str:
    if is_content(path.name):
        return render_content(path, config, log)
    if is_markdown(path.name):
        return render_markdown(path, config, log)
    raise WebgenError(f"unknown file extension {path}")


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    defaults = SiteConfig.from_mapping(config)

    parser = argparse.ArgumentParser(
        prog="webgen",
        description="Render .content and Markdown files and assemble blog posts.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Folder to build, or a single .content/.md file to render to stdout.",
    )
    parser.add_argument("--config", default=config_path, help="Path to config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--draft",
        action="store_true",
        help="Preview a single Markdown file in the browser.",
    )
    parser.add_argument(
        "--quiet",
        action=argparse.BooleanOptionalAction,
        default=parse_bool(config.get("quiet")),
        help="Only report errors.",
    )
    parser.add_argument(
        "--strict-dates",
        action=argparse.BooleanOptionalAction,
        default=defaults.strict_dates,
        help="Treat an unparseable front matter date as an error.",
    )
    for field in fields(SiteConfig):
        if field.name == "strict_dates":
            continue
        parser.add_argument(
            f"--{field.name.replace('_', '-')}",
            default=getattr(defaults, field.name),
            help=f"Reserved name for {field.name.replace('_', ' ')}.",
        )
    return parser


def config_from_args(args: argparse.Namespace) -> SiteConfig:
    return SiteConfig(**{field.name: getattr(args, field.name) for field in fields(SiteConfig)})


def main(argv: Optional[list[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default=DEFAULT_CONFIG)
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    args = build_parser(config, pre_args.config).parse_args(argv)
    log = setup_logger(verbose=not args.quiet)
    site_config = config_from_args(args)
    path = Path(args.path)

    try:
        if args.draft:
            if not is_markdown(path.name):
                raise WebgenError(f"draft preview needs a Markdown file: {path}")
            preview_draft(path, log)
            return
        if path.is_dir():
            start = time.perf_counter()
            build_site(path, site_config, log)
            elapsed = time.perf_counter() - start
            print(f"Build completed in {elapsed:.2f}s.")
            return
        if not path.exists():
            raise FileNotFoundError(f"no such file or directory: {path}")
        sys.stdout.write(render_file(path, site_config, log))
    except (OSError, UnicodeDecodeError, WebgenError, TemplateError) as exc:
        log_error(log, exc)
        sys.exit(1)
