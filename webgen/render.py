from __future__ import annotations

import datetime as dt
import logging
import tempfile
import webbrowser
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import markdown
from markupsafe import Markup

from .config import SiteConfig
from .content import Metadata, extract_metadata, format_date
from .templates import TemplateInfo, render_template, resolve_content_chain, resolve_template

DRAFT_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <style>
      body {
          font-family: serif;
          font-size: 24px;
          margin: 0px 128px;
      }

      p {
          line-height: 2.5;
          margin: 32px 0;
      }

      p code {
          font-size: 20px;
      }

      pre {
          font-size: 16px;
          line-height: initial;
          margin: 32px 0;
          border-left: 4px solid #333333;
          padding-left: 16px;
      }

      h1, h2, h3, h4, h5, h6 {
          font-weight: normal;
          margin: 64px 0 32px 0;
      }
    </style>
  </head>
  <body>
{{body}}
  </body>
</html>
"""


@dataclass(frozen=True)
class ContentRecord:
    title: str = ""
    date: Optional[dt.date] = None
    formatted_date: str = ""
    reading: str = ""
    key: str = ""
    body: Markup = Markup("")

    @classmethod
    def from_metadata(cls, meta: Metadata, key: str = "", body: str = "") -> ContentRecord:
        return cls(
            title=meta.title,
            date=meta.date,
            formatted_date=format_date(meta.date),
            reading=meta.reading,
            key=key,
            body=Markup(body),
        )


def render_record(info: TemplateInfo, record: ContentRecord) -> str:
    return render_template(info, {field.name: getattr(record, field.name) for field in fields(record)})


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


def convert_markdown(text: str) -> str:
    md = markdown.Markdown(extensions=[])
    return md.convert(text)


def render_content(path: Path, config: SiteConfig, log: logging.Logger) -> str:
    log.info("%s", path)
    chain = resolve_content_chain(path, config)
    with open(path, encoding="utf-8", newline="") as handle:
        body = handle.read()
    for info in chain:
        log.info("  using template %s", info.name)
        body = render_record(info, ContentRecord(body=Markup(body)))
    return body


def render_markdown(path: Path, config: SiteConfig, log: logging.Logger) -> str:
    log.info("%s", path)
    meta, body = extract_metadata(path.read_text(encoding="utf-8"), strict=config.strict_dates)
    output = convert_markdown(body)
    info = resolve_template(path, config.markdown_template, config)
    if info is None:
        return output
    log.info("  using markdown template %s", info.name)
    return render_record(info, ContentRecord.from_metadata(meta, body=output))


def render_draft(path: Path, log: logging.Logger) -> str:
    log.info("%s", path)
    _, body = extract_metadata(path.read_text(encoding="utf-8"))
    return DRAFT_TEMPLATE.replace("{{body}}", convert_markdown(body))


def preview_draft(path: Path, log: logging.Logger) -> Path:
    html_doc = render_draft(path, log)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", prefix="draft", suffix=".html", delete=False
    ) as handle:
        handle.write(html_doc)
    draft_path = Path(handle.name)
    log.info("Draft file: %s", draft_path)
    webbrowser.open(draft_path.as_uri())
    return draft_path
