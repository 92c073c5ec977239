"""Command line export of the Gruppentermine report."""
import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from backend.admin_api import AdminApiClient
from backend.errors import ConnectivityError
from processor.event_collector import EventCollector
from processor.event_normalizer import EventNormalizer
from processor.models import REPORT_COLUMNS
from report.html_report import HtmlReportWriter

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://cms.example.org'
FOLDER_ID = '1158'
TOUR_CLASS_ID = 'TO'
EVENT_CLASS_ID = 'EV'
PROBE_ELEMENT_ID = FOLDER_ID

REMEDIATION = """\
Die Verbindung zum Backend ist fehlgeschlagen.

So erneuerst du Cookie und Token:
  1. Im Browser am Admin-Bereich anmelden.
  2. Die Entwicklerwerkzeuge oeffnen (F12), Reiter "Netzwerk".
  3. Eine beliebige Admin-Anfrage auswaehlen und aus den Request-Headern
     den Wert von "Cookie" sowie von "X-pimcore-csrf-token" kopieren.
  4. Das Skript erneut aufrufen:
     gruppentermine-export --cookie "<Cookie>" --token "<Token>"
"""


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def build_parser() -> argparse.ArgumentParser:
    """Command line options, defaulting to the environment."""
    parser = argparse.ArgumentParser(
        description="Gruppentermine aus dem CMS-Backend als HTML-Bericht exportieren"
    )
    parser.add_argument(
        '--cookie',
        default=os.environ.get('BACKEND_COOKIE'),
        help="Cookie-Header der angemeldeten Browsersitzung (env: BACKEND_COOKIE)"
    )
    parser.add_argument(
        '--token',
        default=os.environ.get('BACKEND_CSRF_TOKEN'),
        help="CSRF-Token der Browsersitzung (env: BACKEND_CSRF_TOKEN)"
    )
    parser.add_argument(
        '--base-url',
        default=os.environ.get('BACKEND_URL', DEFAULT_BASE_URL),
        help=f"Adresse des Backends (Standard: {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        '-o', '--output-dir',
        default=os.environ.get('OUTPUT_DIR', '.'),
        help="Verzeichnis fuer den Bericht (Standard: .)"
    )
    parser.add_argument(
        '--delay',
        type=float,
        default=float(os.environ.get('REQUEST_DELAY', '0.1')),
        help="Pause zwischen Detailabfragen in Sekunden (Standard: 0.1)"
    )
    parser.add_argument(
        '--timeout',
        type=int,
        default=int(os.environ.get('TIMEOUT_SECONDS', '30')),
        help="Timeout je Anfrage in Sekunden (Standard: 30)"
    )
    parser.add_argument(
        '--log-level',
        default=os.environ.get('LOG_LEVEL', 'INFO'),
        help="DEBUG, INFO, WARNING oder ERROR (Standard: INFO)"
    )
    return parser


def run_export(
    cookie: str,
    token: str,
    base_url: str = DEFAULT_BASE_URL,
    output_dir: str = '.',
    delay: float = 0.1,
    timeout: int = 30
) -> Path:
    """
    Collect all events and write the report.

    Args:
        cookie: Session cookie header value
        token: Anti-forgery token
        base_url: Backend origin
        output_dir: Directory for the report
        delay: Pause between detail fetches in seconds
        timeout: HTTP request timeout in seconds

    Returns:
        Path of the written report

    Raises:
        ConnectivityError: If the backend rejects the credentials
    """
    start_time = time.time()

    client = AdminApiClient(
        base_url=base_url,
        cookie=cookie,
        csrf_token=token,
        probe_element_id=PROBE_ELEMENT_ID,
        timeout=timeout
    )
    collector = EventCollector(
        client=client,
        normalizer=EventNormalizer(),
        folder_id=FOLDER_ID,
        class_ids=[TOUR_CLASS_ID, EVENT_CLASS_ID],
        delay=delay
    )

    logger.info("Collecting events from backend")
    records = collector.collect()

    logger.info("Writing report")
    path = HtmlReportWriter(output_dir=output_dir).write(records, REPORT_COLUMNS)

    summary = collector.summary
    logger.info(
        "Export completed",
        extra={
            'duration_seconds': round(time.time() - start_time, 2),
            'events_listed': summary.listed,
            'events_skipped': summary.skipped,
            'records': summary.records
        }
    )
    return path


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.cookie or not args.token:
        parser.error("--cookie und --token (oder BACKEND_COOKIE und BACKEND_CSRF_TOKEN) sind erforderlich")

    setup_logging(args.log_level)

    try:
        path = run_export(
            cookie=args.cookie,
            token=args.token,
            base_url=args.base_url,
            output_dir=args.output_dir,
            delay=args.delay,
            timeout=args.timeout
        )
    except ConnectivityError as e:
        logger.error(str(e))
        print(REMEDIATION, file=sys.stderr)
        return 1

    print(f"Bericht gespeichert: {path.resolve()}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
