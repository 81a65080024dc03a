# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from markdown import markdown

_TASK_UNCHECKED = re.compile(r"^(\s*[-*+]\s+)\[ \]\s+")
_TASK_CHECKED = re.compile(r"^(\s*[-*+]\s+)\[(x|X)\]\s+")

EXTENSIONS: List[str] = [
    "extra",
    "sane_lists",
    "nl2br",
    "admonition",
]


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    codebg: str = "#F3F4F6"
    link: str = "#2563EB"


class MarkdownRenderer:
    """
    Task description (markdown) -> HTML page for tkinterweb.

    tkhtml does not render <input>, so task-list items are turned into
    unicode check boxes before conversion.
    """

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or MarkdownTheme()

    def preprocess(self, md_text: str) -> str:
        if not md_text:
            return ""
        out: List[str] = []
        for line in md_text.splitlines():
            line = _TASK_CHECKED.sub(r"\1☑ ", line)
            line = _TASK_UNCHECKED.sub(r"\1☐ ", line)
            out.append(line)
        return "\n".join(out)

    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 12px;
          color: {t.text};
          background: {t.panel};
          font-size: 13px;
          line-height: 1.5;
        }}
        a {{ color: {t.link}; text-decoration: none; }}
        hr {{ border: 0; border-top: 1px solid {t.border}; }}
        blockquote {{
          margin: 0.8em 0;
          padding-left: 0.9em;
          border-left: 4px solid {t.border};
          color: {t.muted};
        }}
        code, pre {{ background: {t.codebg}; }}
        pre {{ padding: 8px 10px; border: 1px solid {t.border}; }}
        """

    def to_html(self, md_text: str) -> str:
        body = markdown(
            self.preprocess(md_text or ""),
            extensions=EXTENSIONS,
            output_format="html5",
        )
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """
