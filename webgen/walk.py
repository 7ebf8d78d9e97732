from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from jinja2 import TemplateError

from .config import SiteConfig
from .errors import WebgenError
from .log import log_error
from .render import render_content, render_markdown, write_text
from .templates import find_gen_dir

DirectoryProcessor = Callable[[Path, SiteConfig, logging.Logger], None]

RECOVERABLE_ERRORS = (OSError, UnicodeDecodeError, WebgenError, TemplateError)


def is_skipped_directory(path: Path, config: SiteConfig) -> bool:
    return Path(path).name in config.skip_names


def target_filename(name: str, src_suffix: str, dst_suffix: str) -> str:
    if name.endswith(f".{src_suffix}"):
        name = name[: -len(src_suffix) - 1]
    return f"{name}.{dst_suffix}"


def is_content(name: str) -> bool:
    return name.endswith(".content")


def is_markdown(name: str) -> bool:
    return name.endswith(".md")


def walk_directories(
    root: Path, process: DirectoryProcessor, config: SiteConfig, log: logging.Logger
) -> None:
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"no such directory: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"not a directory: {root}")
    if is_skipped_directory(root, config):
        return

    def on_error(exc: OSError) -> None:
        log_error(log, exc)

    for dirpath, dirnames, _ in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(name for name in dirnames if name not in config.skip_names)
        directory = Path(dirpath)
        try:
            process(directory, config, log)
        except RECOVERABLE_ERRORS as exc:
            log_error(log, exc)


def process_content_dir(directory: Path, config: SiteConfig, log: logging.Logger) -> None:
    gen_dir = find_gen_dir(directory, config)
    if gen_dir is None:
        return
    for source in sorted(gen_dir.iterdir()):
        if source.is_dir() or not is_content(source.name):
            continue
        target = directory / target_filename(source.name, "content", "html")
        try:
            write_text(target, render_content(source, config, log))
        except RECOVERABLE_ERRORS as exc:
            log_error(log, exc)
            continue
        log.info("  wrote %s", target)


def process_markdown_dir(directory: Path, config: SiteConfig, log: logging.Logger) -> None:
    gen_dir = find_gen_dir(directory, config)
    if gen_dir is None:
        return
    for source in sorted(gen_dir.iterdir()):
        if source.is_dir() or not is_markdown(source.name):
            continue
        target = gen_dir / target_filename(source.name, "md", "content")
        try:
            write_text(target, render_markdown(source, config, log))
        except RECOVERABLE_ERRORS as exc:
            log_error(log, exc)
            continue
        log.info("  wrote %s", target)
