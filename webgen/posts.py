from __future__ import annotations

import datetime as dt
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import SiteConfig
from .content import Metadata, extract_metadata
from .errors import MetadataError, PostsError, WebgenError
from .log import log_error
from .render import ContentRecord, write_text
from .templates import find_posts_dir, render_template, resolve_template


@dataclass(frozen=True)
class PostInfo:
    title: str
    date: Optional[dt.date]
    reading: str
    # Folder under the published post tree, either "slug" or "YYYY/slug".
    key: str
    year: int = 0


def read_post_metadata(path: Path, config: SiteConfig) -> Metadata:
    meta, _ = extract_metadata(path.read_text(encoding="utf-8"), strict=config.strict_dates)
    return meta


def _post_info(folder: Path, key: str, year: int, config: SiteConfig) -> PostInfo:
    index = folder / config.post_index
    try:
        meta = read_post_metadata(index, config)
    except (OSError, UnicodeDecodeError, MetadataError) as exc:
        raise PostsError(f"cannot read post {index}: {exc}") from exc
    if not year and meta.date is not None:
        year = meta.date.year
    return PostInfo(meta.title, meta.date, meta.reading, key, year)


def _subdirectories(path: Path, config: SiteConfig) -> list[Path]:
    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        raise PostsError(f"cannot list posts in {path}: {exc}") from exc
    return [entry for entry in entries if entry.is_dir() and entry.name not in config.skip_names]


def extract_posts(posts_root: Path, config: SiteConfig) -> list[PostInfo]:
    """Read the metadata of every post under ``posts_root``.

    A folder holding the post index is a post of its own. A folder named
    after a year without a post index groups posts one level down, giving
    keys of the form ``YYYY/slug``. Any unreadable post aborts the whole
    extraction so a partial list is never published.
    """
    posts = []
    for folder in _subdirectories(posts_root, config):
        if not (folder / config.post_index).is_file() and folder.name.isdigit():
            year = int(folder.name)
            for post_folder in _subdirectories(folder, config):
                key = f"{folder.name}/{post_folder.name}"
                posts.append(_post_info(post_folder, key, year, config))
            continue
        posts.append(_post_info(folder, folder.name, 0, config))
    return posts


def sort_posts(posts: list[PostInfo]) -> list[PostInfo]:
    # Most recent first; undated posts sink to the end.
    return sorted(posts, key=lambda post: post.date or dt.date.min, reverse=True)


def copy_post(post: PostInfo, posts_root: Path, output_dir: Path, config: SiteConfig) -> None:
    source = posts_root / post.key
    dest = output_dir / post.key
    dest.mkdir(parents=True, exist_ok=True)
    # Top-level files only, subfolders are not copied.
    for item in sorted(source.iterdir()):
        if item.is_dir():
            continue
        if item.name == config.post_index:
            staged = dest / config.staged_dir
            staged.mkdir(exist_ok=True)
            shutil.copyfile(item, staged / config.post_index)
        else:
            shutil.copyfile(item, dest / item.name)


def post_output_dir(directory: Path, config: SiteConfig) -> Path:
    name = config.post_output
    if not name or name in {".", ".."} or name in config.skip_names or name != Path(name).name:
        raise WebgenError(f"refusing to use post output {name!r}: must be a plain folder name")
    output_dir = directory / name
    root_resolved = directory.resolve()
    output_resolved = output_dir.resolve()
    if output_resolved == root_resolved or not output_resolved.is_relative_to(root_resolved):
        raise WebgenError(f"refusing to clean post output outside {directory}: {output_dir}")
    return output_dir


def rebuild_post_tree(
    posts: list[PostInfo], posts_root: Path, output_dir: Path, config: SiteConfig, log: logging.Logger
) -> None:
    log.info("  removing %s", output_dir)
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)
    for post in posts:
        log.info("  copying %s", post.key)
        try:
            copy_post(post, posts_root, output_dir, config)
        except OSError as exc:
            log_error(log, exc)


def build_summary(posts: list[PostInfo], posts_root: Path, config: SiteConfig, log: logging.Logger) -> str:
    records = []
    for post in posts:
        index = posts_root / post.key / config.post_index
        log.info("%s", index)
        try:
            meta = read_post_metadata(index, config)
        except (OSError, UnicodeDecodeError, MetadataError) as exc:
            log_error(log, exc)
            continue
        records.append(ContentRecord.from_metadata(meta, key=post.key))
    info = resolve_template(posts_root, config.summary_template, config)
    if info is None:
        return ""
    log.info("  using summary template %s", info.name)
    return render_template(info, {"posts": records})


def process_posts_dir(directory: Path, config: SiteConfig, log: logging.Logger) -> None:
    posts_root = find_posts_dir(directory, config)
    if posts_root is None:
        return
    log.info("%s", posts_root)
    posts = sort_posts(extract_posts(posts_root, config))
    output_dir = post_output_dir(directory, config)
    rebuild_post_tree(posts, posts_root, output_dir, config, log)
    target = posts_root.parent / config.summary_file
    write_text(target, build_summary(posts, posts_root, config, log))
    log.info("  wrote %s", target)
