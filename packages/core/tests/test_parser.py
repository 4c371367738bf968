"""Tests for decoding an edited review document."""

from datetime import datetime

import pytest

from redraft_core.comments import CommentIndex
from redraft_core.errors import TemplateParseError
from redraft_core.models import ExistingComment, PullRequestInfo, TopLevelEntry
from redraft_core.parser import parse_template
from redraft_core.scanner import INLINE_END_MARKER, INLINE_START_MARKER, TOP_LEVEL_END_MARKER, TOP_LEVEL_START_MARKER
from redraft_core.template import REVIEW_SIGNATURE, render_template

REV = "1" * 40
REV2 = "2" * 40

SIMPLE = f"""\
commit {REV}
diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1,2 +1,3 @@
 foo
+bar
 baz
"""


def _insert_after(text: str, anchor: str, *new_lines: str) -> str:
    lines = text.splitlines()
    at = lines.index(anchor) + 1
    return "\n".join(lines[:at] + list(new_lines) + lines[at:]) + "\n"


def _template(diff: str, comments=(), entries=()) -> str:
    pr = PullRequestInfo(
        number=7,
        author="ann",
        title="Add bar",
        state="open",
        base_sha="b" * 40,
        head_sha=REV,
        created_at=datetime(2024, 1, 1),
        url="https://github.com/owner/repo/pull/7",
        body="Description with a line that is long enough to need wrapping at seventy columns, really.",
    )
    return render_template(pr, list(entries), diff, CommentIndex.from_comments(comments), diffstat=" a.txt | 1 +\n")


def _set_top_level(text: str, *body_lines: str) -> str:
    return _insert_after(text, TOP_LEVEL_START_MARKER, *body_lines)


class TestNewComments:
    def test_end_to_end_single_comment(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "nice"))
        assert len(request.comments) == 1
        c = request.comments[0]
        assert (c.path, c.position, c.body) == ("a.txt", 2, "nice")
        assert c.revision == REV
        assert request.commit_id == REV

    def test_anchoring_after_third_line(self):
        diff = "diff --git a/f.py b/f.py\n--- a/f.py\n+++ b/f.py\n@@ -1,4 +1,5 @@\n a\n b\n+c\n d\n e\n"
        request = parse_template(_insert_after(diff, "+c", "why c?"))
        assert [(c.path, c.position) for c in request.comments] == [("f.py", 3)]

    def test_consecutive_lines_merge(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "first line", "second line"))
        assert len(request.comments) == 1
        assert request.comments[0].body == "first line\nsecond line"

    def test_blank_line_inside_comment_kept(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "para one", "", "para two"))
        assert [c.body for c in request.comments] == ["para one\n\npara two"]

    def test_trailing_blank_lines_dropped(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "only", "", ""))
        assert request.comments[0].body == "only"

    def test_diff_line_separates_comments(self):
        text = _insert_after(SIMPLE, " foo", "one")
        text = _insert_after(text, " baz", "two")
        request = parse_template(text)
        assert [(c.position, c.body) for c in request.comments] == [(1, "one"), (3, "two")]

    def test_comment_directly_below_first_hunk_header(self):
        """Text directly under the first @@ anchors before any counted line."""
        request = parse_template(_insert_after(SIMPLE, "@@ -1,2 +1,3 @@", "header note"))
        assert request.comments[0].position == 0

    def test_text_before_first_hunk_is_dropped(self):
        request = parse_template(_insert_after(SIMPLE, "+++ b/a.txt", "stray"))
        assert request.comments == []

    def test_text_after_commit_boundary_is_dropped(self):
        second = "diff --git a/a.txt b/a.txt\n--- a/a.txt\n+++ b/a.txt\n@@ -1 +1 @@\n-foo\n+FOO\n"
        diff = SIMPLE + f"commit {REV2}\n" + second
        text = _insert_after(diff, f"commit {REV2}", "stray")
        text = _insert_after(text, "+FOO", "shout")
        request = parse_template(text)
        assert [(c.revision, c.path, c.position, c.body) for c in request.comments] == [(REV2, "a.txt", 2, "shout")]
        assert request.commit_id == REV2

    def test_comment_starting_with_commit_stays_a_comment(self):
        diff = SIMPLE + "@@ -10,2 +11,3 @@\n qux\n+quux\n end\n"
        text = _insert_after(diff, "+bar", "commit this separately please")
        text = _insert_after(text, "+quux", "typo here")
        request = parse_template(text)
        assert [(c.path, c.position, c.body) for c in request.comments] == [
            ("a.txt", 2, "commit this separately please"),
            ("a.txt", 6, "typo here"),
        ]
        assert request.commit_id == REV

    def test_line_starting_with_at_sign_is_diff_text(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "@bob see this"))
        assert request.comments == []

    def test_echo_lines_are_not_comments(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "*\told text", "\tindented"))
        assert request.comments == []

    def test_echo_line_does_not_advance_position(self):
        request = parse_template(_insert_after(SIMPLE, "+bar", "*\told", "new"))
        assert request.comments[0].position == 2


class TestTopLevel:
    def test_top_level_body_extracted(self):
        text = _set_top_level(_template(SIMPLE), "", "Looks good overall.", "  Indented detail.", "")
        request = parse_template(text)
        assert request.body == f"Looks good overall.\n  Indented detail.\n{REVIEW_SIGNATURE}"
        assert request.comments == []

    def test_empty_region_means_no_body(self):
        text = _set_top_level(_template(SIMPLE), "", "   ", "")
        assert parse_template(text).body is None

    def test_diff_like_text_inside_region_is_not_interpreted(self):
        text = _set_top_level(_template(SIMPLE), "+ not a diff line", "@@ nor a hunk")
        request = parse_template(text)
        assert request.body.startswith("+ not a diff line\n@@ nor a hunk")
        assert request.comments == []

    def test_text_outside_markers_never_joins_body(self):
        text = _insert_after(_template(SIMPLE), "+bar", "inline remark")
        request = parse_template(text)
        assert request.body is None
        assert [c.body for c in request.comments] == ["inline remark"]


class TestRoundTrip:
    def _comments(self):
        return [
            ExistingComment(
                id=11,
                revision=REV,
                path="a.txt",
                position=2,
                author="bob",
                created_at=datetime(2024, 1, 2),
                body="why bar? " * 12,
            ),
            ExistingComment(
                id=12,
                revision=REV,
                path="a.txt",
                position=2,
                author="ann",
                created_at=datetime(2024, 1, 3),
                body="because",
                in_reply_to=11,
            ),
        ]

    def _entries(self):
        return [
            TopLevelEntry(
                body="Please add tests.\nAlso docs.",
                author="bob",
                created_at=datetime(2024, 1, 2),
                state="CHANGES_REQUESTED",
            ),
            TopLevelEntry(body="Done", author="ann", created_at=datetime(2024, 1, 3)),
        ]

    def test_untouched_template_decodes_to_empty_request(self):
        request = parse_template(_template(SIMPLE, self._comments(), self._entries()))
        assert request.comments == []
        assert request.body is None
        assert request.is_empty

    def test_reply_typed_after_block_links_to_thread(self):
        text = _insert_after(_template(SIMPLE, self._comments()), INLINE_END_MARKER, "fair enough")
        request = parse_template(text)
        assert len(request.comments) == 1
        c = request.comments[0]
        assert (c.path, c.position, c.body, c.reply_to) == ("a.txt", 2, "fair enough", 11)

    def test_thread_forgotten_after_next_diff_line(self):
        text = _insert_after(_template(SIMPLE, self._comments()), " baz", "unrelated")
        request = parse_template(text)
        assert request.comments[0].reply_to is None
        assert request.comments[0].position == 3

    def test_text_inside_block_is_ignored(self):
        text = _insert_after(_template(SIMPLE, self._comments()), INLINE_START_MARKER, "typed in the wrong place")
        assert parse_template(text).comments == []


class TestMalformedMarkers:
    def test_unclosed_top_level_region(self):
        text = _template(SIMPLE).replace(TOP_LEVEL_END_MARKER + "\n", "")
        with pytest.raises(TemplateParseError, match="never closed"):
            parse_template(text)

    def test_end_marker_without_start(self):
        text = _template(SIMPLE).replace(TOP_LEVEL_START_MARKER + "\n", "")
        with pytest.raises(TemplateParseError, match="without a matching begin"):
            parse_template(text)

    def test_nested_top_level_start(self):
        text = _set_top_level(_template(SIMPLE), TOP_LEVEL_START_MARKER)
        with pytest.raises(TemplateParseError) as exc:
            parse_template(text)
        assert exc.value.line_number > 0

    def test_inline_end_without_start(self):
        text = _insert_after(SIMPLE, "+bar", INLINE_END_MARKER)
        with pytest.raises(TemplateParseError, match="comment block"):
            parse_template(text)

    def test_unclosed_inline_block(self):
        text = _insert_after(SIMPLE, "+bar", INLINE_START_MARKER, "*\tdangling")
        with pytest.raises(TemplateParseError, match="never closed"):
            parse_template(text)


def test_empty_document():
    request = parse_template("")
    assert request.is_empty
    assert request.commit_id is None


def test_neutral_header_revision_not_used_as_commit():
    request = parse_template(_template("diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1 +1 @@\n-a\n+b\n"))
    assert request.commit_id is None
