from __future__ import annotations

import logging
from pathlib import Path

import pytest

from webgen.config import SiteConfig
from webgen.log import LOGGER_NAME


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def make_post(posts_root: Path, key: str, title: str, date: str = "", extra: str = "") -> Path:
    lines = ["---", f"title: {title}"]
    if date:
        lines.append(f"date: {date}")
    lines += ["reading: 3 min", "---", extra or f"Body of {title}.", ""]
    return write(posts_root / key / "index.md", "\n".join(lines))


def snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def config() -> SiteConfig:
    return SiteConfig()


@pytest.fixture
def log() -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.tests")


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
