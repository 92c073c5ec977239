"""Unit tests for HtmlReportWriter."""
from datetime import datetime

from bs4 import BeautifulSoup

from processor.models import REPORT_COLUMNS
from report.html_report import HtmlReportWriter


def read_table(path):
    soup = BeautifulSoup(path.read_text(encoding='utf-8'), 'html.parser')
    header = [th.get_text() for th in soup.find('thead').find_all('th')]
    rows = [
        [td.get_text() for td in tr.find_all('td')]
        for tr in soup.find('tbody').find_all('tr')
    ]
    return soup, header, rows


class TestHtmlReportWriter:
    """Test cases for HtmlReportWriter class."""

    def test_write_creates_timestamped_file(self, tmp_path):
        """Test that the file name embeds the generation time."""
        writer = HtmlReportWriter(output_dir=str(tmp_path / "out"))

        path = writer.write([], REPORT_COLUMNS, generated_at=datetime(2025, 6, 1, 8, 5, 9))

        assert path == tmp_path / "out" / "gruppentermine_2025-06-01_080509.html"
        assert path.exists()

    def test_write_keeps_column_and_row_order(self, tmp_path):
        """Test column order, row order and empty cells for missing keys."""
        records = [
            {"ID": "3", "Titel": "Ohne Datum", "Veranstaltungsort": None},
            {
                "ID": "1",
                "Gruppe": "Jugend",
                "Titel": "Skitour",
                "Termin_Start": "2025-06-01",
                "Beschreibung": "Zeile 1\nZeile 2\n",
                "Beschreibung_HTML": "<p>Zeile 1</p><p>Zeile 2</p>"
            }
        ]

        path = HtmlReportWriter(output_dir=str(tmp_path)).write(records, REPORT_COLUMNS)
        soup, header, rows = read_table(path)

        assert header == REPORT_COLUMNS
        assert rows[0] == ["", "Ohne Datum", "", "", "", "", "", "", "3"]
        assert rows[1] == [
            "Jugend", "Skitour", "2025-06-01", "", "", "", "", "Zeile 1\nZeile 2\n", "1"
        ]
        assert soup.title.get_text() == "Gruppentermine"

    def test_cell_text_is_escaped(self, tmp_path):
        """Test that markup in values is written as text."""
        records = [{"ID": "1", "Titel": "<b>Fett</b> & mehr"}]

        path = HtmlReportWriter(output_dir=str(tmp_path)).write(records, ["Titel", "ID"])
        content = path.read_text(encoding='utf-8')

        assert "&lt;b&gt;Fett&lt;/b&gt; &amp; mehr" in content
