"""
Timeline export to JSON, CSV and PDF.

The format is checked first, before any event is touched. The timeline is
built with the same filter vocabulary as the timeline endpoint but without a
page limit, so the export always covers the full filtered set.

Formats
-------
- ``json``: the full :class:`PropertyTimeline` (``metadata`` stripped from
  every event, summary ones included, when ``include_metadata`` is false).
- ``csv`` : header ``Date,Type,Title,Description,Source,Tags``; every value
  quoted, inner quotes doubled, rows separated by ``\\n``.
- ``pdf`` : a one-document table rendered with reportlab.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from proptrail.core.contracts.events import HistoryEvent
from proptrail.core.contracts.requests import EXPORT_FORMATS, TimelineExportOptions
from proptrail.core.contracts.timeline import PropertyTimeline, TimelineEvent
from proptrail.core.errors import UnsupportedFormatError

from .timeline import build_timeline

CSV_HEADERS: tuple[str, ...] = ("Date", "Type", "Title", "Description", "Source", "Tags")

CONTENT_TYPES: dict[str, str] = {
    "json": "application/json",
    "csv": "text/csv",
    "pdf": "application/pdf",
}


@dataclass(frozen=True, slots=True)
class ExportedTimeline:
    """Serialized timeline plus the metadata a caller needs to ship it."""

    content: bytes
    content_type: str
    filename: str


def _csv_row(event: TimelineEvent) -> list[str]:
    return [
        event.timestamp.isoformat(),
        event.type.value,
        event.title,
        event.description,
        event.source.name,
        ";".join(event.tags),
    ]


def render_csv(timeline: PropertyTimeline) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for event in timeline.events:
        writer.writerow(_csv_row(event))
    return buffer.getvalue().removesuffix("\n").encode("utf-8")


_WITHOUT_METADATA: dict[str, Any] = {
    "events": {"__all__": {"metadata"}},
    "summary": {
        "key_milestones": {"__all__": {"metadata"}},
        "recent_activity": {"__all__": {"metadata"}},
    },
}


def render_json(timeline: PropertyTimeline, *, include_metadata: bool = True) -> bytes:
    exclude = None if include_metadata else _WITHOUT_METADATA
    return timeline.model_dump_json(indent=2, exclude=exclude).encode("utf-8")


def render_pdf(timeline: PropertyTimeline) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), title="Property timeline")
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]

    summary = timeline.summary
    story: list[object] = [
        Paragraph(f"<b>Property {escape(timeline.property_id)} Timeline</b>", styles["Title"]),
        Paragraph(
            f"{summary.total_events} events, "
            f"{summary.date_range.start:%Y-%m-%d} to {summary.date_range.end:%Y-%m-%d}",
            styles["Normal"],
        ),
        Spacer(1, 12),
    ]

    rows: list[list[object]] = [["Date", "Type", "Title", "Source", "Tags"]]
    for event in timeline.events:
        rows.append(
            [
                f"{event.timestamp:%Y-%m-%d %H:%M}",
                event.type.value,
                Paragraph(escape(event.title), cell),
                event.source.name,
                Paragraph(escape(", ".join(event.tags)), cell),
            ]
        )

    table = Table(rows, colWidths=[100, 110, 300, 120, 140], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ]
        )
    )
    story.append(table)

    doc.build(story)
    return buffer.getvalue()


def _renderer(options: TimelineExportOptions) -> Callable[[PropertyTimeline], bytes]:
    if options.format == "json":
        return lambda t: render_json(t, include_metadata=options.include_metadata)
    if options.format == "csv":
        return render_csv
    return render_pdf


def check_format(fmt: str) -> None:
    """Raise :class:`UnsupportedFormatError` unless ``fmt`` is exportable."""
    if fmt not in EXPORT_FORMATS:
        raise UnsupportedFormatError(fmt, EXPORT_FORMATS)


def export_timeline(
    events: Sequence[HistoryEvent],
    property_id: str,
    options: TimelineExportOptions,
    *,
    now: datetime,
) -> ExportedTimeline:
    """Serialize the full filtered timeline of ``property_id``."""
    check_format(options.format)
    timeline = build_timeline(
        events, property_id, options.to_filters(), page=1, limit=None, now=now
    )
    content = _renderer(options)(timeline)
    return ExportedTimeline(
        content=content,
        content_type=CONTENT_TYPES[options.format],
        filename=f"property-{property_id}-timeline.{options.format}",
    )


__all__ = [
    "CSV_HEADERS",
    "CONTENT_TYPES",
    "ExportedTimeline",
    "render_csv",
    "render_json",
    "render_pdf",
    "check_format",
    "export_timeline",
]
