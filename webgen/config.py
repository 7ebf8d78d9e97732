from __future__ import annotations

import json
import sys
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

if sys.version_info >= (3, 11):
    import tomllib as toml
else:
    import tomli as toml

DEFAULT_CONFIG = "webgen.toml"


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


@dataclass(frozen=True)
class SiteConfig:
    """Reserved directory and file names used while generating a site.

    Marker directories (``gen_dir`` and ``posts_dir``) are also recognised
    with a leading dot, which keeps them hidden in the published tree.
    """

    gen_dir: str = "__src"
    posts_dir: str = "POSTS"
    content_template: str = "CONTENT.template"
    sub_template: str = "SUB.template"
    markdown_template: str = "MARKDOWN.template"
    summary_template: str = "SUMMARY.template"
    post_index: str = "index.md"
    post_output: str = "post"
    summary_file: str = "index.content"
    strict_dates: bool = False

    @classmethod
    def from_mapping(cls, data: dict) -> SiteConfig:
        values = {}
        for field in fields(cls):
            if data.get(field.name) is None:
                continue
            value = data[field.name]
            if field.type in ("bool", bool):
                values[field.name] = parse_bool(value)
            else:
                values[field.name] = str(value).strip()
        return cls(**values)

    @property
    def gen_dir_names(self) -> tuple[str, str]:
        return self.gen_dir, f".{self.gen_dir}"

    @property
    def posts_dir_names(self) -> tuple[str, str]:
        return self.posts_dir, f".{self.posts_dir}"

    @property
    def staged_dir(self) -> str:
        return f".{self.gen_dir}"

    @property
    def skip_names(self) -> frozenset[str]:
        return frozenset({".git", *self.gen_dir_names, *self.posts_dir_names})
