"""Data models for the event export."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Column order handed to the report writer
REPORT_COLUMNS = [
    'Gruppe',
    'Titel',
    'Termin_Start',
    'Termin_Ende',
    'Tourenleitung',
    'Veranstaltungsort',
    'Treffpunkt',
    'Beschreibung',
    'ID'
]

# One flat report row. A missing key means the source had no data for it.
ReportRecord = Dict[str, Optional[str]]


@dataclass
class RawEventListing:
    """Event row from a listing query."""
    id: str
    fullpath: Optional[str] = None
    type: Optional[str] = None
    subtype: Optional[str] = None
    classname: Optional[str] = None
    filename: Optional[str] = None
    creation_date: Optional[int] = None
    modification_date: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'RawEventListing':
        return cls(
            id=str(row['id']),
            fullpath=row.get('fullpath'),
            type=row.get('type'),
            subtype=row.get('subtype'),
            classname=row.get('classname'),
            filename=row.get('filename'),
            creation_date=row.get('creationDate'),
            modification_date=row.get('modificationDate')
        )


@dataclass
class ExportSummary:
    """Statistics of one export run."""
    listed: int = 0
    fetched: int = 0
    skipped: int = 0
    records: int = 0
    errors: List[str] = field(default_factory=list)
