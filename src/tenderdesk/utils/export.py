"""Tender list export.

Writes the tender table as CSV. The Excel flavour is the same CSV with a
UTF-8 byte order mark, which Excel needs to detect the encoding.
"""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import IO, Callable, Iterable, Optional

from tenderdesk.shared.models.database import Tender

ENCODING_CSV = "utf-8"
ENCODING_EXCEL = "utf-8-sig"

STATUS_LABELS = {
    "identified": "Identified",
    "evaluating": "Evaluating",
    "preparing": "Preparing",
    "submitted": "Submitted",
    "bid_opening": "Bid Opening",
    "under_evaluation": "Under Evaluation",
    "won": "Won",
    "lost": "Lost",
    "abandoned": "Abandoned",
}


def _day(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else ""


def _number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def _embedded_name(tender: Tender, relation: str) -> str:
    embedded = getattr(tender, relation, None)
    if isinstance(embedded, dict):
        return embedded.get("name") or ""
    return ""


EXPORT_COLUMNS: list[tuple[str, Callable[[Tender], str]]] = [
    ("Title", lambda t: t.title),
    ("Organization", lambda t: _embedded_name(t, "organization")),
    ("Category", lambda t: _embedded_name(t, "category")),
    ("Description", lambda t: t.description or ""),
    ("Status", lambda t: STATUS_LABELS.get(t.status, t.status)),
    ("Due Date", lambda t: _day(t.due_date)),
    ("Applied", lambda t: "Yes" if t.applied else "No"),
    ("Applied Date", lambda t: _day(t.applied_date)),
    # Zero bids are left blank like missing ones
    ("Our Bid Amount", lambda t: f"{t.our_bid_amount:.2f}" if t.our_bid_amount else ""),
    ("Priority Score", lambda t: _number(t.priority_score)),
    ("Document URL", lambda t: t.document_url or ""),
    ("Created Date", lambda t: _day(t.created_at)),
]


def tender_export_row(tender: Tender) -> list[str]:
    return [render(tender) for _, render in EXPORT_COLUMNS]


def write_tenders_csv(tenders: Iterable[Tender], stream: IO[str]) -> int:
    """Write the header and one row per tender to ``stream``.

    Returns:
        Number of tender rows written
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow([header for header, _ in EXPORT_COLUMNS])
    count = 0
    for tender in tenders:
        writer.writerow(tender_export_row(tender))
        count += 1
    return count


def export_filename(now: datetime) -> str:
    return f"tenders-export-{now:%Y-%m-%d-%H%M%S}.csv"


def export_tenders(
    tenders: Iterable[Tender],
    directory: Path,
    *,
    excel: bool = False,
    now: Optional[datetime] = None,
) -> Path:
    """Write a timestamped export file into ``directory`` and return its path.

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(directory) / export_filename(now or datetime.now())
    with open(path, "w", encoding=ENCODING_EXCEL if excel else ENCODING_CSV, newline="") as f:
        write_tenders_csv(tenders, f)
    return path


__all__ = [
    "EXPORT_COLUMNS",
    "STATUS_LABELS",
    "export_filename",
    "export_tenders",
    "tender_export_row",
    "write_tenders_csv",
]
