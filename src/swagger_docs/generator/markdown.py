"""Markdown to HTML for description fields."""

import logging

import markdown
from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

# nl2br mirrors "breaks: true"; fenced_code and tables cover the common GFM blocks
EXTENSIONS = ["nl2br", "fenced_code", "tables"]


def render_markdown(text) -> Markup:
    """Render a description to HTML, falling back to escaped text on any failure."""
    if not text:
        return Markup("")
    if not isinstance(text, str):
        text = str(text)

    try:
        return Markup(markdown.markdown(text, extensions=EXTENSIONS))
    except Exception as e:
        logger.warning("Failed to parse markdown: %s", e)
        return escape(text)
