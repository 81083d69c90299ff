"""
Markdown editing helpers for node and project documents.

These are the text operations behind the document editor: slash-command
lookup and insertion, wrapping a selection in markdown syntax, registering
pasted images and substituting their data back in for display, and finding
glossary terms mentioned in a document.
"""

import re
from typing import List, Optional, Tuple

from flowdoc.core.records import Document, GlossaryTerm, Image, new_id


class SlashCommand:
    def __init__(self, label: str, command: str, end: str = "", wrap: bool = False):
        self.label = label
        self.command = command
        self.end = end
        self.wrap = wrap

    def __repr__(self):
        return f"<SlashCommand '{self.label}'>"


SLASH_COMMANDS: List[SlashCommand] = [
    SlashCommand("Heading 1", "# "),
    SlashCommand("Heading 2", "## "),
    SlashCommand("Heading 3", "### "),
    SlashCommand("Bold", "**", end="**", wrap=True),
    SlashCommand("Italic", "*", end="*", wrap=True),
    SlashCommand("Strikethrough", "~~", end="~~", wrap=True),
    SlashCommand("Inline code", "`", end="`", wrap=True),
    SlashCommand("Bulleted list", "- "),
    SlashCommand("Numbered list", "1. "),
    SlashCommand("Checklist", "- [ ] "),
    SlashCommand("Quote", "> "),
    SlashCommand("Code block", "```\n", end="\n```"),
    SlashCommand("Divider", "\n---\n"),
    SlashCommand("Link", "[", end="](url)"),
    SlashCommand("Table", "| Column 1 | Column 2 |\n|---|---|\n| "),
]


def slash_query(text: str, cursor: int) -> Optional[str]:
    """
    The slash-menu filter at ``cursor``, or None when the menu should be closed.

    The menu opens only for a ``/`` typed at the start of a line; the filter is
    the lower-cased text between the slash and the cursor.
    """
    before = text[:cursor]
    slash = before.rfind("/")
    if slash == -1:
        return None
    after = before[slash + 1:]
    at_line_start = slash == 0 or before[slash - 1] == "\n"
    if not at_line_start or "\n" in after:
        return None
    return after.lower()


def filter_commands(query: str = "", commands: Optional[List[SlashCommand]] = None) -> List[SlashCommand]:
    commands = SLASH_COMMANDS if commands is None else commands
    query = query.lower()
    return [c for c in commands if query in c.label.lower()]


def insert_markdown(content: str, start: int, end: int, before: str, after: str = "", wrap: bool = False) -> Tuple[str, int]:
    """
    Surround the selection ``content[start:end]`` with ``before``/``after``.

    Returns the new text and the cursor position: just after ``before``, or
    after the wrapped selection when ``wrap`` is set.
    """
    selected = content[start:end]
    text = content[:start] + before + selected + after + content[end:]
    cursor = start + len(before) + (len(selected) if wrap and selected else 0)
    return text, cursor


def apply_slash_command(content: str, cursor: int, command: SlashCommand) -> Tuple[str, int]:
    """Replace the ``/query`` before the cursor with the command's markdown."""
    before = content[:cursor]
    slash = before.rfind("/")
    if slash == -1:
        return content, cursor
    text = content[:slash] + command.command + command.end + content[cursor:]
    return text, slash + len(command.command)


def add_image(document: Document, data: str, image_id: Optional[str] = None) -> str:
    """Register image data on the document and return the markdown that references it."""
    image = Image(image_id or new_id("img"), data)
    document.images.append(image)
    return f"\n![image]({image.id})\n"


def embed_images(content: str, images: List[Image]) -> str:
    """Swap image-id references for the image data, for display."""
    for image in images:
        pattern = re.compile(r"!\[([^\]]*)\]\(" + re.escape(image.id) + r"\)")
        content = pattern.sub(lambda m, img=image: f"![{img.id}]({img.data})", content)
    return content


def find_glossary_terms(content: str, glossary: List[GlossaryTerm]) -> List[GlossaryTerm]:
    """Glossary terms mentioned in ``content`` (case-insensitive), in glossary order."""
    lowered = content.lower()
    return [t for t in glossary if t.term and t.term.lower() in lowered]
