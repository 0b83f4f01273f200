"""
Session export

Each generated concept is recorded as a SessionRecord; the session can be
written to CSV for later review.
"""

import csv
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    """One concept generation within a session."""
    prompt: str
    mode: str
    location: str = ''
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    site_description: str = ''
    image_description: str = ''
    suggestion: str = ''
    intervention_matches: int = 0
    average_cost: Optional[float] = None
    average_ease: Optional[float] = None
    average_effectiveness: Optional[float] = None
    status: str = ''
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat(timespec='seconds'))


CSV_COLUMNS: List[str] = [f.name for f in fields(SessionRecord)]


def _cell(value) -> str:
    return '' if value is None else str(value)


def export_session_csv(records: Iterable[SessionRecord], output_path: Path) -> Path:
    """
    Write session records to a CSV file.

    Args:
        records: Records in generation order
        output_path: Destination file (parent folders are created)

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for record in records:
            writer.writerow([_cell(getattr(record, name)) for name in CSV_COLUMNS])
            count += 1

    logger.info(f"Exported {count} session record(s) to {output_path}")
    return output_path


def default_export_name(now: Optional[datetime] = None) -> str:
    """File name like 'session_20240131_154500.csv'."""
    now = now or datetime.now()
    return f"session_{now.strftime('%Y%m%d_%H%M%S')}.csv"


__all__ = ['SessionRecord', 'CSV_COLUMNS', 'export_session_csv', 'default_export_name']
