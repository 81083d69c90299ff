"""Tests for the document editing helpers."""

from flowdoc.core.markdown import (
    SLASH_COMMANDS, add_image, apply_slash_command, embed_images, filter_commands,
    find_glossary_terms, insert_markdown, slash_query,
)
from flowdoc.core.records import Document, GlossaryTerm, Image


def command(label):
    return next(c for c in SLASH_COMMANDS if c.label == label)


class TestSlashMenu:
    def test_query_at_line_start(self):
        text = "Intro\n/head"
        assert slash_query(text, len(text)) == "head"

    def test_query_empty_after_slash(self):
        assert slash_query("/", 1) == ""

    def test_slash_mid_line_is_ignored(self):
        text = "and/or"
        assert slash_query(text, len(text)) is None

    def test_newline_closes_menu(self):
        text = "/head\nmore"
        assert slash_query(text, len(text)) is None

    def test_no_slash(self):
        assert slash_query("plain", 5) is None

    def test_filter_is_case_insensitive(self):
        labels = [c.label for c in filter_commands("HEAD")]
        assert labels == ["Heading 1", "Heading 2", "Heading 3"]

    def test_empty_filter_returns_all(self):
        assert len(filter_commands("")) == len(SLASH_COMMANDS)

    def test_apply_heading(self):
        text, cursor = apply_slash_command("Intro\n/hea", 10, command("Heading 2"))
        assert text == "Intro\n## "
        assert cursor == len(text)

    def test_apply_wrapping_command_places_cursor_inside(self):
        text, cursor = apply_slash_command("/bo", 3, command("Bold"))
        assert text == "****"
        assert cursor == 2


class TestInsertMarkdown:
    def test_wrap_selection(self):
        text, cursor = insert_markdown("make this bold", 10, 14, "**", "**", wrap=True)
        assert text == "make this **bold**"
        assert cursor == 16

    def test_insert_without_selection(self):
        text, cursor = insert_markdown("item", 0, 0, "- ")
        assert text == "- item"
        assert cursor == 2


class TestImages:
    def test_add_image(self):
        doc = Document()
        snippet = add_image(doc, "data:image/png;base64,AAA", image_id="img-1")
        assert snippet == "\n![image](img-1)\n"
        assert doc.get_image("img-1").data == "data:image/png;base64,AAA"

    def test_generated_id(self):
        doc = Document()
        snippet = add_image(doc, "data:x")
        assert doc.images[0].id.startswith("img-")
        assert doc.images[0].id in snippet

    def test_embed_images(self):
        content = "Before\n![image](img-1)\nAfter ![image](img-9)"
        shown = embed_images(content, [Image("img-1", "data:png")])
        assert shown == "Before\n![img-1](data:png)\nAfter ![image](img-9)"


def test_find_glossary_terms():
    glossary = [GlossaryTerm("SKU", "Stock keeping unit"), GlossaryTerm("WIP", "Work in progress")]
    found = find_glossary_terms("Each sku is scanned", glossary)
    assert [t.term for t in found] == ["SKU"]
