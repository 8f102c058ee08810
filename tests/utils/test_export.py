"""Tests for the tender CSV export."""

import io
from datetime import datetime

from tenderdesk.shared.models.database import Tender
from tenderdesk.utils.export import (
    EXPORT_COLUMNS,
    export_filename,
    export_tenders,
    tender_export_row,
    write_tenders_csv,
)

HEADER = (
    "Title,Organization,Category,Description,Status,Due Date,Applied,Applied Date,"
    "Our Bid Amount,Priority Score,Document URL,Created Date"
)


def make_tender(**overrides) -> Tender:
    row = {
        "id": "T1",
        "user_company_id": "c1",
        "organization_id": "o1",
        "title": "Road repairs",
        "due_date": "2026-03-01T09:00:00+00:00",
        "created_at": "2026-01-15T08:00:00+00:00",
    }
    row.update(overrides)
    return Tender.model_validate(row)


class TestExportRow:
    def test_full_row(self):
        tender = make_tender(
            organization={"name": "Eskom Holdings SOC Ltd"},
            category={"name": "Construction"},
            status="bid_opening",
            applied=True,
            applied_date="2026-02-20T10:00:00+00:00",
            our_bid_amount=1250000,
            priority_score=8,
            document_url="https://example.co.za/t.pdf",
        )

        assert tender_export_row(tender) == [
            "Road repairs",
            "Eskom Holdings SOC Ltd",
            "Construction",
            "",
            "Bid Opening",
            "2026-03-01",
            "Yes",
            "2026-02-20",
            "1250000.00",
            "8",
            "https://example.co.za/t.pdf",
            "2026-01-15",
        ]

    def test_missing_values_are_blank(self):
        row = tender_export_row(make_tender(created_at=None, our_bid_amount=0))

        assert row[1:4] == ["", "", ""]
        assert row[6:10] == ["No", "", "", ""]
        assert row[11] == ""

    def test_fractional_priority(self):
        assert tender_export_row(make_tender(priority_score=7.5))[9] == "7.5"

    def test_one_value_per_column(self):
        assert len(tender_export_row(make_tender())) == len(EXPORT_COLUMNS)


class TestWriteCsv:
    def test_header_and_quoting(self):
        stream = io.StringIO()

        count = write_tenders_csv([make_tender(title='Fencing, "Phase 2"', description="line one\nline two")], stream)

        lines = stream.getvalue().split("\n")
        assert count == 1
        assert lines[0] == HEADER
        assert lines[1].startswith('"Fencing, ""Phase 2""",,,"line one')

    def test_empty_export_has_header_only(self):
        stream = io.StringIO()

        assert write_tenders_csv([], stream) == 0
        assert stream.getvalue() == HEADER + "\n"


class TestExportFile:
    def test_filename_timestamp(self):
        assert export_filename(datetime(2026, 3, 4, 15, 6, 7)) == "tenders-export-2026-03-04-150607.csv"

    def test_plain_csv_has_no_bom(self, tmp_path):
        path = export_tenders([make_tender()], tmp_path, now=datetime(2026, 3, 4, 15, 6, 7))

        assert path == tmp_path / "tenders-export-2026-03-04-150607.csv"
        assert path.read_bytes().startswith(b"Title,")

    def test_excel_csv_starts_with_bom(self, tmp_path):
        path = export_tenders([make_tender(title="Ingcebo")], tmp_path, excel=True)

        content = path.read_bytes()
        assert content.startswith(b"\xef\xbb\xbfTitle,")
        assert "Ingcebo" in content.decode("utf-8-sig")
