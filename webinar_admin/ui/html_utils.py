"""Utilities for preparing HTML snippets before rendering in Streamlit."""
import html
from textwrap import dedent
from typing import Optional


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML so Streamlit doesn't treat it as Markdown code.

    Lines indented by four or more spaces would render as code blocks, so
    every line is dedented and left-stripped.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def escape(value: Optional[str]) -> str:
    """HTML-escape user-provided text; None becomes an empty string."""
    return html.escape(value or "", quote=True)
