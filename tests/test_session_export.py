import csv
from datetime import datetime

from playful_environment.core.session_export import (
    CSV_COLUMNS,
    SessionRecord,
    default_export_name,
    export_session_csv,
)


def test_export_writes_header_and_rows(tmp_path):
    records = [
        SessionRecord(prompt="Add a swing, please", mode="composite", location="Lisbon",
                      latitude=38.7, intervention_matches=2, average_cost=2.5, status="generated"),
        SessionRecord(prompt="Shade", mode="inpainting", status="failed: timeout"),
    ]

    path = export_session_csv(records, tmp_path / "nested" / "session.csv")

    with open(path, newline='', encoding='utf-8') as f:
        rows = list(csv.DictReader(f))

    assert list(rows[0].keys()) == CSV_COLUMNS
    assert rows[0]["prompt"] == "Add a swing, please"
    assert rows[0]["latitude"] == "38.7"
    assert rows[0]["longitude"] == ""
    assert rows[0]["average_cost"] == "2.5"
    assert rows[1]["mode"] == "inpainting"
    assert rows[1]["status"] == "failed: timeout"


def test_export_empty_session_writes_header_only(tmp_path):
    path = export_session_csv([], tmp_path / "empty.csv")
    assert path.read_text(encoding='utf-8').strip() == ','.join(CSV_COLUMNS)


def test_default_export_name():
    assert default_export_name(datetime(2024, 1, 31, 15, 45, 0)) == "session_20240131_154500.csv"
