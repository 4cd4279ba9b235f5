from __future__ import annotations

from conftest import metric, stats
from configs.config import Config
from utils.diff_report import (
    classify_changes,
    common_path_prefix,
    details_summary,
    render_report,
    render_row,
)
from utils.stats_models import BranchStats, ChangeTotals


def test_common_prefix_truncates_to_directory_boundary() -> None:
    assert common_path_prefix(["a/b/c.js", "a/b/d.js", "a/e.js"]) == "a/"
    assert common_path_prefix(["dist/app.js", "dist/apple.js"]) == "dist/"
    assert common_path_prefix(["dist/js/a.js", "dist/js/b.js"]) == "dist/js/"


def test_common_prefix_without_shared_directory() -> None:
    assert common_path_prefix(["a.js", "b.js"]) == ""
    assert common_path_prefix(["abc/x.js", "abd/y.js"]) == ""


def test_common_prefix_needs_two_paths() -> None:
    assert common_path_prefix([]) == ""
    assert common_path_prefix(["dist/only.js"]) == ""
    assert common_path_prefix(["dist/only.js", "dist/only.js"]) == ""


def test_classification_is_total_and_exclusive() -> None:
    target = stats({"keep.js": metric(10), "grow.js": metric(10), "gone.js": metric(10)})
    subject = stats({"keep.js": metric(10, 1, 1), "grow.js": metric(11), "new.js": metric(5)})

    changes = classify_changes(target, subject)

    by_path = {c.path: c.status for c in changes}
    assert len(changes) == len(by_path) == 4
    assert by_path == {
        "keep.js": "unchanged",
        "grow.js": "modified",
        "gone.js": "removed",
        "new.js": "added",
    }
    assert [c.path for c in changes] == sorted(by_path)


def test_subject_total_equals_added_modified_unchanged_sum() -> None:
    target = stats({"keep.js": metric(10), "grow.js": metric(10), "gone.js": metric(7)})
    subject = stats({"keep.js": metric(10), "grow.js": metric(25), "new.js": metric(5)})

    changes = classify_changes(target, subject)
    present = [c.current for c in changes if c.status in ("added", "modified", "unchanged")]
    previous = [c.previous for c in changes if c.status in ("removed", "modified", "unchanged")]

    assert sum(m.size for m in present) == subject.total_size
    assert sum(m.gzip_size for m in present) == subject.total_gzip
    assert sum(m.brotli_size for m in present) == subject.total_brotli
    assert sum(m.size for m in previous) == target.total_size


def test_modified_and_added_scenario() -> None:
    target = stats({"x.js": metric(100, 60, 50)})
    subject = stats({"x.js": metric(150, 80, 70), "y.js": metric(50, 30, 20)})

    report = render_report(target, subject)

    assert report.startswith(Config.COMMENT_MARKER + "\n")
    assert "The total bytes added are:" in report
    assert "<sub>200 B `+100 B`</sub>" in report
    assert "<summary><sub>1 file changed, 1 file added</sub></summary>" in report
    assert "| <sub>x.js</sub> | <sub>150 B `+50 B`</sub> | <sub>80 B `+20 B`</sub> | <sub>70 B `+20 B`</sub> |" in report
    assert "| <sub>y.js</sub> | <sub>50 B `+50 B`</sub> | <sub>30 B `+30 B`</sub> | <sub>20 B `+20 B`</sub> |" in report
    assert "All changed files are in" not in report


def test_removed_scenario() -> None:
    target = stats({"z.js": metric(200, 90, 80)})
    subject = BranchStats()

    report = render_report(target, subject)

    assert "The total bytes removed are:" in report
    assert "| <sub>~z.js~</sub> | <sub>0 B `-200 B`</sub> | <sub>0 B `-90 B`</sub> | <sub>0 B `-80 B`</sub> |" in report
    assert "<summary><sub>1 file removed</sub></summary>" in report


def test_unchanged_files_are_not_rendered() -> None:
    target = stats({"dist/same.js": metric(10, 5, 5), "dist/app.js": metric(10)})
    subject = stats({"dist/same.js": metric(10, 6, 7), "dist/app.js": metric(12)})

    report = render_report(target, subject)

    assert "same.js" not in report
    assert "<summary><sub>1 file changed</sub></summary>" in report


def test_common_prefix_is_stripped_from_rows() -> None:
    target = stats({"dist/a.js": metric(10), "dist/b.js": metric(10)})
    subject = stats({"dist/a.js": metric(20), "dist/b.js": metric(10)})

    report = render_report(target, subject)

    assert "<sub>All changed files are in dist/</sub>" in report
    assert "| <sub>a.js</sub> |" in report
    assert "dist/a.js" not in report


def test_details_open_flag() -> None:
    target = stats({"a.js": metric(1)})
    subject = stats({"a.js": metric(2)})

    assert "  <details open>" in render_report(target, subject, True)
    assert "  <details>" in render_report(target, subject, False)


def test_empty_union_renders_zero_totals() -> None:
    report = render_report(BranchStats(), BranchStats())

    assert "<sub>0 B ` 0 B`</sub>" in report
    assert "<summary><sub></sub></summary>" in report
    assert report.rstrip().endswith("</details>")


def test_details_summary_pluralizes_and_skips_zero_counts() -> None:
    assert details_summary(ChangeTotals(changed=2, added=0, removed=3)) == "2 files changed, 3 files removed"
    assert details_summary(ChangeTotals(changed=0, added=1, removed=0)) == "1 file added"
    assert details_summary(ChangeTotals()) == ""


def test_render_row_escapes_pipes() -> None:
    target = BranchStats()
    subject = stats({"odd|name.js": metric(3, 3, 3)})
    (change,) = classify_changes(target, subject)

    assert render_row(change).startswith("| <sub>odd\\|name.js</sub> |")


def test_custom_marker() -> None:
    report = render_report(stats({"a.js": metric(1)}), stats({"a.js": metric(2)}), marker="<!-- mine -->")
    assert report.startswith("<!-- mine -->\n")
