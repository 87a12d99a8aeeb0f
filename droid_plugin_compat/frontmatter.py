"""Read and write YAML frontmatter on markdown documents."""

from __future__ import annotations

import re
from typing import Any

import yaml

# Closing delimiter must start a line; the block itself may be empty
_FRONTMATTER_PATTERN = re.compile(
    r"^---[ \t]*\n(.*?)(?:^|\n)---\s*(?:\n(.*))?\Z", re.MULTILINE | re.DOTALL
)


class FrontmatterError(ValueError):
    """Raised when a frontmatter block cannot be parsed."""


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split markdown into frontmatter and body.

    Returns:
        Tuple of (frontmatter_yaml, body) where frontmatter may be None
    """
    match = _FRONTMATTER_PATTERN.match(content)

    if match:
        return match.group(1), match.group(2) or ""

    return None, content


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse a markdown document into its frontmatter mapping and body.

    Documents without frontmatter yield an empty mapping and the
    content unchanged.

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping
    """
    frontmatter, body = split_frontmatter(content)

    if frontmatter is None:
        return {}, content

    try:
        data = yaml.safe_load(frontmatter)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML frontmatter: {e}") from e

    if data is None:
        return {}, body

    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}"
        )

    return data, body


def format_frontmatter(data: dict[str, Any], body: str) -> str:
    """Render a frontmatter mapping and body back into a markdown document."""
    if not data:
        return body

    rendered = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    return f"---\n{rendered}---\n\n{body}"
