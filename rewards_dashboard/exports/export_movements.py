"""Export the merged movement report to a JSON or PDF file."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from ..extract_source import ExtractDataSource
from ..logging_config import configure_logging
from ..reporting import DateRange, build_movement_report_pdf, generate_movement_report
from ..reporting.dates import QUERY_GRAMMAR_ISO, QUERY_GRAMMARS

logger = logging.getLogger(__name__)

FORMATS = ("json", "pdf")


def export_movements(
    source: ExtractDataSource,
    output: Path,
    *,
    date_range: DateRange | None = None,
    period_month: str | None = None,
    output_format: str = "json",
) -> int:
    """Write the report to ``output`` and return the number of exported rows."""

    if output_format not in FORMATS:
        raise ValueError(f"Formato de salida desconocido: {output_format}")

    report = asyncio.run(
        generate_movement_report(source, date_range=date_range, period_month=period_month)
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    if output_format == "pdf":
        output.write_bytes(build_movement_report_pdf(report, date_range=date_range).getvalue())
    else:
        output.write_text(
            json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8"
        )
    rows = len(report["rows"])
    logger.info("Exportados %s movimientos a %s", rows, output)
    return rows


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("output", type=Path, help="Archivo de destino")
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=FORMATS,
        default="json",
        help="Formato de salida",
    )
    parser.add_argument("--start-date", help="Fecha inicial inclusiva")
    parser.add_argument("--end-date", help="Fecha final inclusiva (todo el día)")
    parser.add_argument(
        "--month",
        help="Limita el histórico a un período YYYY-MM",
    )
    parser.add_argument(
        "--date-format",
        choices=QUERY_GRAMMARS,
        default=os.getenv("QUERY_DATE_FORMAT", QUERY_GRAMMAR_ISO),
        help="Formato de --start-date/--end-date (iso = YYYY-MM-DD, dmy = dd/MM/yyyy)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    load_dotenv()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FILE"))
    args = parse_args(argv)

    uri = os.getenv("MONGO_URI_REWARDS")
    if not uri:
        raise RuntimeError("MONGO_URI_REWARDS no está definida")

    date_range = DateRange.from_query(args.start_date, args.end_date, args.date_format)
    source = ExtractDataSource(uri, database=os.getenv("EXTRACT_DB_NAME"))
    try:
        export_movements(
            source,
            args.output,
            date_range=date_range,
            period_month=args.month,
            output_format=args.output_format,
        )
    finally:
        source.close()


if __name__ == "__main__":
    main()
