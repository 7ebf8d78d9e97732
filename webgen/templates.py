from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, NamedTuple, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from .config import SiteConfig
from .errors import TemplateNotFoundError, WebgenError


class TemplateInfo(NamedTuple):
    template: Template
    name: str


def ancestors(path: Path) -> Iterator[Path]:
    """Yield the directory holding ``path`` and each parent up to the root."""
    previous = Path(os.path.abspath(path))
    current = previous.parent
    while current != previous:
        yield current
        previous = current
        current = current.parent


def find_gen_dir(directory: Path, config: SiteConfig) -> Optional[Path]:
    for name in config.gen_dir_names:
        candidate = directory / name
        if candidate.is_dir():
            return candidate
    return None


def find_posts_dir(directory: Path, config: SiteConfig) -> Optional[Path]:
    for gen_name in config.gen_dir_names:
        for posts_name in config.posts_dir_names:
            candidate = directory / gen_name / posts_name
            if candidate.is_dir():
                return candidate
    return None


def load_template(path: Path) -> Template:
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        autoescape=True,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    return env.get_template(path.name)


def resolve_content_chain(path: Path, config: SiteConfig) -> list[TemplateInfo]:
    # Sub templates stack up innermost first; the first terminal template ends the chain.
    chain: list[TemplateInfo] = []
    for directory in ancestors(path):
        gen_dir = find_gen_dir(directory, config)
        if gen_dir is None:
            continue
        sub_path = gen_dir / config.sub_template
        if sub_path.is_file():
            chain.append(TemplateInfo(load_template(sub_path), str(sub_path)))
        terminal_path = gen_dir / config.content_template
        if terminal_path.is_file():
            chain.append(TemplateInfo(load_template(terminal_path), str(terminal_path)))
            return chain
    raise TemplateNotFoundError(f"no template found for {path}")


def resolve_template(path: Path, name: str, config: SiteConfig) -> Optional[TemplateInfo]:
    for directory in ancestors(path):
        gen_dir = find_gen_dir(directory, config)
        if gen_dir is None:
            continue
        template_path = gen_dir / name
        if template_path.is_file():
            return TemplateInfo(load_template(template_path), str(template_path))
    return None


def render_template(info: TemplateInfo, context: dict) -> str:
    # Runtime errors inside a template fail that file only.
    try:
        return info.template.render(context)
    except (TypeError, ValueError, ArithmeticError, AttributeError, LookupError) as exc:
        raise WebgenError(f"template {info.name}: {exc}") from exc
