"""
Response formatter for free-text provider output.

Turns raw markdown from a model into a titled article body with normalized
heading spacing, repaired bullets and a numbered references section.
"""

import re
import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..models.article import Citation


logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Article"

TITLE_PATTERN = re.compile(r"^#{1,2}(?:\s+(.*?))?\s*$")
SECTION_BOUNDARY = re.compile(r"(?m)^(?=##\s)")
HEADING_LINE = re.compile(r"(?m)^(#{2,3})[ \t]+([^\n]+?)[ \t]*$")
# Marker alone on its line, content on the next non-empty line
DETACHED_BULLET = re.compile(r"(?m)^([-*])[ \t]*\n(?:[ \t]*\n)*[ \t]*(?!#{2,3}\s)(\S[^\n]*)")
BULLET_SPACING = re.compile(r"(?m)^([-*])[ \t]+(?=\S)")
WHITESPACE_ONLY_LINE = re.compile(r"(?m)^[ \t]+$")
EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


class FormattedResponse(BaseModel):
    title: str = DEFAULT_TITLE
    content: str = ""
    references: list[str] = Field(default_factory=list)


def clean_reference_url(url: str) -> str:
    """Reduce a URL to host plus first path segment, without protocol or trailing slash."""
    cleaned = re.sub(r"^https?://", "", url.strip()).rstrip("/")
    return "/".join(cleaned.split("/")[:2])


def _extract_title(text: str) -> tuple[str, str]:
    lines = text.split("\n")
    first_line = lines[0].strip()
    match = TITLE_PATTERN.match(first_line)
    # A bare "#" or "##" is a heading with no text
    title = (match.group(1) or "").strip() if match else first_line
    body = "\n".join(lines[1:]).strip()
    return title, body


def _format_section(section: str) -> str:
    section = DETACHED_BULLET.sub(r"\1 \2", section)
    section = BULLET_SPACING.sub(r"\1 ", section)
    section = HEADING_LINE.sub(r"\n\1 \2\n", section)
    return section.strip()


def format_response(
    text: Optional[str],
    citations: Optional[list[Citation]] = None,
) -> Optional[FormattedResponse]:
    """
    Normalize raw provider text into title, content and references.

    Args:
        text: Raw markdown returned by the provider
        citations: Numbered citations to render as a references section

    Returns:
        FormattedResponse, or None when the text is empty
    """
    if not text or not text.strip():
        return None

    citations = citations or []
    text = WHITESPACE_ONLY_LINE.sub("", text.replace("\r\n", "\n")).strip()

    title, body = _extract_title(text)

    sections = [_format_section(s) for s in SECTION_BOUNDARY.split(body)]
    sections = [s for s in sections if s]

    references = []
    if citations:
        sections.append("## References")
        for citation in citations:
            sections.append(f"[{citation.id}] {clean_reference_url(citation.url)}")
            references.append(citation.url)

    content = EXCESS_BLANK_LINES.sub("\n\n", "\n\n".join(sections)).strip()

    return FormattedResponse(
        title=title or DEFAULT_TITLE,
        content=content,
        references=references,
    )
