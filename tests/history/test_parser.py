"""Tests for git log --numstat parsing."""

from review_miner.history.models import FileChange
from review_miner.history.parser import parse_log, parse_log_lines

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40


class TestParseLogLines:
    """Test parse_log_lines function."""

    def test_empty_input(self):
        """No lines should produce no commits and no skips."""
        result = parse_log_lines([])
        assert result.commits == []
        assert result.skipped_lines == 0

    def test_final_commit_is_flushed(self):
        """The last commit has no following header but must still be emitted."""
        result = parse_log_lines(
            [
                f"{SHA_A}|2024-01-01|first",
                "1\t1\ta.py",
                f"{SHA_B}|2024-01-02|second",
                "2\t0\tb.py",
            ]
        )
        assert [c.hash for c in result.commits] == [SHA_A, SHA_B]
        assert result.commits[-1].files == (FileChange("b.py", 2, 0),)

    def test_single_header_without_stats(self):
        """A lone header still produces a commit with zero deltas."""
        result = parse_log_lines([f"{SHA_A}|2024-01-01|Merged PR 7: empty merge"])
        assert len(result.commits) == 1
        commit = result.commits[0]
        assert commit.files == ()
        assert commit.aggregate_added == 0
        assert commit.aggregate_deleted == 0

    def test_consecutive_headers(self):
        """Back-to-back headers (merge commits) each become a commit."""
        result = parse_log_lines(
            [
                f"{SHA_A}|2024-01-01|merge one",
                f"{SHA_B}|2024-01-01|merge two",
                f"{SHA_C}|2024-01-02|real change",
                "4\t2\tsrc/x.py",
            ]
        )
        assert [c.hash for c in result.commits] == [SHA_A, SHA_B, SHA_C]
        assert result.commits[2].aggregate_added == 4

    def test_aggregates_equal_file_sums(self):
        """Aggregate deltas are the sums over file entries."""
        result = parse_log_lines(
            [
                f"{SHA_A}|2024-03-05|feature",
                "10\t2\ta.py",
                "5\t7\tb.py",
                "0\t1\tc.py",
            ]
        )
        commit = result.commits[0]
        assert commit.aggregate_added == sum(f.added for f in commit.files)
        assert commit.aggregate_deleted == sum(f.deleted for f in commit.files)
        assert (commit.aggregate_added, commit.aggregate_deleted) == (15, 10)

    def test_binary_sentinel_recorded_as_unknown(self):
        """'-' counts are kept as unknown entries and summed as zero."""
        result = parse_log_lines(
            [
                f"{SHA_A}|2024-03-05|add logo",
                "-\t-\tassets/logo.png",
                "3\t0\tREADME.md",
            ]
        )
        commit = result.commits[0]
        assert commit.files[0] == FileChange("assets/logo.png", None, None)
        assert commit.aggregate_added == 3
        assert commit.aggregate_deleted == 0

    def test_subject_with_pipes(self):
        """Subjects may contain '|' and must be kept whole."""
        result = parse_log_lines([f"{SHA_A}|2024-01-01|fix auth | update deps"])
        assert result.commits[0].message == "fix auth | update deps"

    def test_rename_path_kept_verbatim(self):
        """Rename notation is preserved as the path."""
        result = parse_log_lines(
            [f"{SHA_A}|2024-01-01|move", "0\t0\tsrc/{old => new}/mod.py"]
        )
        assert result.commits[0].files[0].path == "src/{old => new}/mod.py"

    def test_malformed_lines_skipped_and_counted(self):
        """Lines matching neither grammar are skipped, not fatal."""
        result = parse_log_lines(
            [
                "warning: refname is ambiguous",
                f"{SHA_A}|2024-01-01|work",
                "not a stat line",
                "1\t1\ta.py",
                "x\ty\tz",
            ]
        )
        assert len(result.commits) == 1
        assert result.commits[0].files == (FileChange("a.py", 1, 1),)
        assert result.skipped_lines == 3

    def test_blank_lines_not_counted(self):
        """Blank separators are ignored silently."""
        result = parse_log_lines(["", f"{SHA_A}|2024-01-01|x", "", "   ", "1\t0\ta.py", ""])
        assert result.skipped_lines == 0
        assert result.commits[0].aggregate_added == 1

    def test_stat_before_any_header_is_skipped(self):
        """Orphan stat lines have no commit to attach to."""
        result = parse_log_lines(["5\t5\torphan.py", f"{SHA_A}|2024-01-01|x"])
        assert result.skipped_lines == 1
        assert result.commits[0].files == ()

    def test_header_with_bad_date_orphans_its_stats(self):
        """A header whose date is not YYYY-MM-DD is skipped with its stat lines."""
        result = parse_log_lines(
            [
                f"{SHA_A}|2024-01-01|good",
                "1\t0\ta.py",
                f"{SHA_B}|2024-1-2|bad date",
                "9\t9\tb.py",
                f"{SHA_C}|2024-01-03|good again",
                "2\t0\tc.py",
            ]
        )
        assert [c.hash for c in result.commits] == [SHA_A, SHA_C]
        assert result.commits[0].aggregate_added == 1
        assert result.skipped_lines == 2

    def test_preserves_input_order(self):
        """Output order follows input order, not date order."""
        result = parse_log_lines(
            [
                f"{SHA_B}|2024-05-01|newer",
                f"{SHA_A}|2024-01-01|older",
            ]
        )
        assert [c.date for c in result.commits] == ["2024-05-01", "2024-01-01"]

    def test_accepts_generator(self):
        """Any iterable of lines works, including one-shot generators."""
        lines = (line for line in [f"{SHA_A}|2024-01-01|x", "1\t2\ta.py"])
        result = parse_log_lines(lines)
        assert result.commits[0].aggregate_deleted == 2


class TestParseLog:
    """Test parse_log on whole output strings."""

    def test_sample_stream(self, sample_log_lines):
        """The shared sample parses into three commits."""
        result = parse_log("\n".join(sample_log_lines))
        assert result.total_commits == 3
        assert result.skipped_lines == 0
        assert result.commits[2].files[1].added is None

    def test_windows_line_endings(self):
        """CRLF output parses the same as LF."""
        raw = f"{SHA_A}|2024-01-01|x\r\n3\t1\ta.py\r\n"
        result = parse_log(raw)
        assert result.commits[0].message == "x"
        assert result.commits[0].files == (FileChange("a.py", 3, 1),)
