"""HTML report output for the collected event records."""
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from processor.models import ReportRecord

logger = logging.getLogger(__name__)

REPORT_STYLE = """
body { font-family: sans-serif; margin: 1.5em; }
table { border-collapse: collapse; }
th, td { border: 1px solid #bbb; padding: 4px 8px; vertical-align: top; }
th { background: #eee; text-align: left; }
td { white-space: pre-line; }
"""


class HtmlReportWriter:
    """Writes record tables as standalone, timestamped HTML files."""

    FILENAME_PREFIX = 'gruppentermine'
    TITLE = 'Gruppentermine'

    def __init__(self, output_dir: str = '.'):
        """
        Initialize the report writer.

        Args:
            output_dir: Directory the report files are written to
        """
        self.output_dir = Path(output_dir)

    def write(
        self,
        records: List[ReportRecord],
        columns: Sequence[str],
        generated_at: Optional[datetime] = None
    ) -> Path:
        """
        Render the records as an HTML table and write the file.

        Args:
            records: Rows in display order
            columns: Column names in display order
            generated_at: Generation time, defaults to now

        Returns:
            Path of the written report
        """
        generated_at = generated_at or datetime.now()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / (
            f"{self.FILENAME_PREFIX}_{generated_at.strftime('%Y-%m-%d_%H%M%S')}.html"
        )

        document = self.render(records, columns, generated_at)
        path.write_text(document, encoding='utf-8')

        logger.info(f"Wrote {len(records)} records to {path}")
        return path

    def render(
        self,
        records: List[ReportRecord],
        columns: Sequence[str],
        generated_at: datetime
    ) -> str:
        """Build the report document as a string."""
        soup = BeautifulSoup(
            '<!DOCTYPE html><html><head></head><body></body></html>',
            'html.parser'
        )

        meta = soup.new_tag('meta', charset='utf-8')
        title = soup.new_tag('title')
        title.string = self.TITLE
        style = soup.new_tag('style')
        style.string = REPORT_STYLE
        soup.head.extend([meta, title, style])

        heading = soup.new_tag('h1')
        heading.string = self.TITLE
        stamp = soup.new_tag('p')
        stamp.string = (
            f"Erstellt am {generated_at.strftime('%Y-%m-%d %H:%M')}, "
            f"{len(records)} Termine"
        )
        soup.body.extend([heading, stamp, self._table(soup, records, columns)])

        return str(soup)

    @staticmethod
    def _table(soup: BeautifulSoup, records: List[ReportRecord], columns: Sequence[str]):
        table = soup.new_tag('table')

        header_row = soup.new_tag('tr')
        for column in columns:
            th = soup.new_tag('th')
            th.string = column
            header_row.append(th)
        thead = soup.new_tag('thead')
        thead.append(header_row)
        table.append(thead)

        tbody = soup.new_tag('tbody')
        for record in records:
            row = soup.new_tag('tr')
            for column in columns:
                td = soup.new_tag('td')
                value = record.get(column)
                td.string = '' if value is None else str(value)
                row.append(td)
            tbody.append(row)
        table.append(tbody)

        return table
