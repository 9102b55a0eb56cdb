"""
Tests for path sanitization and vault containment.
"""

from notesync.sync.paths import (
    generate_filename,
    get_parent_path,
    is_contained,
    join_path,
    remove_extension,
    sanitize,
    sanitize_filename,
)


class TestSanitize:
    """Tests for sanitize()."""

    def test_traversal_cannot_climb_above_root(self):
        result = sanitize("../../../etc/passwd")
        assert result == "/etc/passwd"
        assert ".." not in result.split("/")
        assert "\\" not in result

    def test_resolves_traversal_inside_path(self):
        assert sanitize("/vault/../../../etc/passwd") == "/etc/passwd"

    def test_collapses_repeated_separators(self):
        assert sanitize("/vault//notes///file.md") == "/vault/notes/file.md"

    def test_normalizes_backslashes(self):
        assert sanitize("vault\\notes\\file.md") == "/vault/notes/file.md"

    def test_backslash_traversal_is_resolved(self):
        assert sanitize("/vault\\..\\..\\secret") == "/secret"

    def test_replaces_illegal_characters(self):
        assert sanitize("/vault/file:name*test?.md") == "/vault/file-name-test-.md"

    def test_trims_whitespace(self):
        assert sanitize("  /vault/my note.md  ") == "/vault/my note.md"

    def test_legal_names_are_unchanged(self):
        for path in ("/vault/a--b.md", "/vault/v1..2.md", "/vault/2024--draft.md", "/vault/...md"):
            assert sanitize(path) == path

    def test_keeps_leading_slash(self):
        assert sanitize("/vault/notes") == "/vault/notes"

    def test_drops_dot_segments(self):
        assert sanitize("/vault/./notes/.") == "/vault/notes"

    def test_empty_is_root(self):
        assert sanitize("") == "/"
        assert sanitize("../..") == "/"

    def test_truncates_to_200_characters(self):
        assert len(sanitize("/" + "a" * 250)) == 200

    def test_is_deterministic(self):
        raw = "/Vault/../Other//x?.md"
        assert sanitize(raw) == sanitize(raw)


class TestIsContained:
    """Tests for is_contained()."""

    def test_path_within_vault(self):
        assert is_contained("/vault/notes/file.md", "/vault")

    def test_path_outside_vault(self):
        assert not is_contained("/other/file.md", "/vault")

    def test_traversal_to_sibling_is_rejected(self):
        assert not is_contained(sanitize("/vault/../sibling"), "/vault")
        assert not is_contained("/vault/../other/file.md", "/vault")

    def test_safe_segment_is_contained(self):
        for segment in ("note.md", "Daily Notes", "2024-01-01.md", "a/b/c.md"):
            assert is_contained(sanitize("/vault/" + segment), "/vault")

    def test_case_insensitive(self):
        assert is_contained("/Vault/Notes/File.md", "/vault")

    def test_sibling_with_common_prefix_is_rejected(self):
        assert not is_contained("/vault2/file.md", "/vault")

    def test_root_itself_is_contained(self):
        assert is_contained("/vault", "/vault")

    def test_store_root_contains_everything(self):
        assert is_contained("/anything/at/all.md", "/")


class TestSanitizeFilename:
    """Tests for sanitize_filename()."""

    def test_removes_traversal_sequences(self):
        assert sanitize_filename("../../../etc/passwd") == "etc-passwd"

    def test_removes_special_characters(self):
        assert sanitize_filename("file:name*test?.md") == "file-name-test-.md"

    def test_trims_whitespace(self):
        assert sanitize_filename("  my note  ") == "my note"

    def test_limits_length(self):
        assert len(sanitize_filename("a" * 250)) == 200

    def test_normal_names_unchanged(self):
        assert sanitize_filename("My Note Title") == "My Note Title"

    def test_removes_backslashes(self):
        assert sanitize_filename("path\\to\\file") == "path-to-file"


class TestGenerateFilename:
    """Tests for generate_filename()."""

    def test_uses_title(self):
        assert generate_filename("Meeting: notes", "body") == "Meeting- notes"

    def test_falls_back_to_first_line(self):
        assert generate_filename("  ", "First line\nsecond") == "First line"

    def test_untitled_when_empty(self):
        assert generate_filename("", "") == "Untitled"

    def test_limits_length(self):
        assert len(generate_filename("x" * 150, "")) == 100


class TestPathHelpers:
    """Tests for small path helpers."""

    def test_parent_path(self):
        assert get_parent_path("/vault/notes/file.md") == "/vault/notes"
        assert get_parent_path("/a/b/c/d.md") == "/a/b/c"

    def test_parent_of_top_level(self):
        assert get_parent_path("/vault") == ""
        assert get_parent_path("file.md") == ""

    def test_remove_extension(self):
        assert remove_extension("note.md") == "note"
        assert remove_extension("note.txt") == "note.txt"
        assert remove_extension("note") == "note"
        assert remove_extension("note.md.backup") == "note.md.backup"

    def test_join_path(self):
        assert join_path("/vault", "Inbox", "note.md") == "/vault/Inbox/note.md"
        assert join_path("/vault/", "/Inbox/") == "/vault/Inbox"
        assert join_path("", "note.md") == "/note.md"
