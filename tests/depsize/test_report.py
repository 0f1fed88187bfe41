"""Tests for size aggregation and report rendering."""

from __future__ import annotations

import json
from types import MappingProxyType

from depsize.engines.traversal import TraversalResult
from depsize.report import ReportLine, aggregate, format_megabytes, render_json, render_text


def _result(sizes: dict[str, int], **kwargs) -> TraversalResult:
    return TraversalResult(root=kwargs.pop("root", "app"), sizes=MappingProxyType(sizes), **kwargs)


class TestAggregate:
    def test_total_is_sum_of_entries(self):
        sizes = {"app": 2048, "lib": 4096, "util": 7}
        report = aggregate(sizes)
        assert report.total_bytes == sum(sizes.values())
        assert len(report.lines) == len(sizes)

    def test_lines_sorted_by_name(self):
        report = aggregate({"b": 1, "a": 2})
        assert report.lines == (ReportLine("a", 2), ReportLine("b", 1))

    def test_empty(self):
        report = aggregate({})
        assert report.lines == ()
        assert report.total_bytes == 0
        assert report.total_megabytes == 0.0

    def test_megabytes(self):
        assert aggregate({"big": 3 * 1024 * 1024}).total_megabytes == 3.0


class TestFormatMegabytes:
    def test_small_rounds_to_zero(self):
        assert format_megabytes(1024) == "0.00 MB"

    def test_two_decimals(self):
        assert format_megabytes(6144) == "0.01 MB"
        assert format_megabytes(int(1.5 * 1024 * 1024)) == "1.50 MB"


class TestRenderText:
    def test_lists_packages_and_total(self):
        text = render_text(_result({"app": 2048, "lib": 4096}))
        assert "List of all the dependant packages and their size" in text
        assert "app : 2048" in text
        assert "lib : 4096" in text
        assert "Estimated Total Size: 0.01 MB" in text

    def test_not_found_and_failures(self):
        text = render_text(
            _result(
                {"app": 1},
                not_found=("ghost",),
                failed=MappingProxyType({"flaky": "ReadTimeout: timed out"}),
            )
        )
        assert "Package Not Found: ghost" in text
        assert "Failed to resolve 1 package(s):" in text
        assert "  flaky: ReadTimeout: timed out" in text

    def test_root_not_found_has_no_package_list(self):
        text = render_text(_result({}, root="ghost", not_found=("ghost",)))
        assert "List of all the dependant packages" not in text
        assert "Estimated Total Size: 0.00 MB" in text


class TestRenderJson:
    def test_structure(self):
        data = json.loads(
            render_json(
                _result(
                    {"app": 2048, "lib": 4096},
                    not_found=("ghost",),
                    fetch_count=3,
                )
            )
        )
        assert data["root"] == "app"
        assert data["packages"] == {"app": 2048, "lib": 4096}
        assert data["total_bytes"] == 6144
        assert data["total_mb"] == 0.01
        assert data["not_found"] == ["ghost"]
        assert data["failed"] == {}
        assert data["fetches"] == 3

    def test_single_line(self):
        text = render_json(_result({"app": 1, "lib": 2}, failed=MappingProxyType({"x": "boom"})))
        assert "\n" not in text
        assert json.loads(text)["failed"] == {"x": "boom"}
