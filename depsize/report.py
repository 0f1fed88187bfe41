"""Size aggregation and report rendering."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass

from depsize.engines.traversal.models import TraversalResult

_BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class ReportLine:
    name: str
    size: int


@dataclass(frozen=True)
class Report:
    lines: tuple[ReportLine, ...]
    total_bytes: int

    @property
    def total_megabytes(self) -> float:
        return self.total_bytes / _BYTES_PER_MB


def aggregate(sizes: Mapping[str, int]) -> Report:
    """One line per package (sorted by name) and the summed size."""
    lines = tuple(ReportLine(name, size) for name, size in sorted(sizes.items()))
    return Report(lines=lines, total_bytes=sum(line.size for line in lines))


def format_megabytes(total_bytes: int) -> str:
    return f"{total_bytes / _BYTES_PER_MB:.2f} MB"


def render_text(result: TraversalResult) -> str:
    report = aggregate(result.sizes)
    out: list[str] = []

    for name in result.not_found:
        out.append(f"Package Not Found: {name}")

    if report.lines:
        out.append("")
        out.append("List of all the dependant packages and their size")
        for line in report.lines:
            out.append(f"{line.name} : {line.size}")

    if result.failed:
        out.append("")
        out.append(f"Failed to resolve {len(result.failed)} package(s):")
        for name, reason in sorted(result.failed.items()):
            out.append(f"  {name}: {reason}")

    out.append("")
    out.append(f"Estimated Total Size: {format_megabytes(report.total_bytes)}")
    out.append("")
    return "\n".join(out)


def render_json(result: TraversalResult) -> str:
    """One compact JSON object on a single line, so several roots form JSON Lines."""
    report = aggregate(result.sizes)
    data = {
        "root": result.root,
        "packages": {line.name: line.size for line in report.lines},
        "total_bytes": report.total_bytes,
        "total_mb": round(report.total_megabytes, 2),
        "not_found": list(result.not_found),
        "failed": dict(sorted(result.failed.items())),
        "fetches": result.fetch_count,
        "elapsed": result.elapsed,
    }
    return json.dumps(data, separators=(",", ":"))
