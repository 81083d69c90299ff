"""Tests for semantic version counters."""

import pytest

from flowdoc.core.records import DocumentVersion
from flowdoc.core.versioning import increment_version, next_document_version, parse_version


class TestIncrementVersion:
    def test_successive_patch_bumps(self):
        version = "1.0.0"
        seen = []
        for _ in range(3):
            version = increment_version(version, "patch")
            seen.append(version)
        assert seen == ["1.0.1", "1.0.2", "1.0.3"]

    def test_minor_resets_patch(self):
        assert increment_version("1.2.3", "minor") == "1.3.0"

    def test_major_resets_minor_and_patch(self):
        assert increment_version("1.2.3", "major") == "2.0.0"

    def test_unknown_kind_returns_input(self):
        assert increment_version("1.2.3", "build") == "1.2.3"

    @pytest.mark.parametrize("bad", ["1.0", "1.0.0.0", "a.b.c", ""])
    def test_malformed_version_raises(self, bad):
        with pytest.raises(ValueError):
            increment_version(bad, "patch")

    def test_parse_version(self):
        assert parse_version("10.20.30") == (10, 20, 30)


class TestDocumentVersions:
    def test_first_save_is_initial_version(self):
        assert next_document_version([]) == "1.0.0"

    def test_follows_last_entry(self):
        log = [
            DocumentVersion("1.0.0", "a", "t0"),
            DocumentVersion("1.0.1", "b", "t1"),
        ]
        assert next_document_version(log) == "1.0.2"
