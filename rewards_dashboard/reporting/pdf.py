"""Exportación del reporte de movimientos a PDF."""
from __future__ import annotations

from io import BytesIO
from typing import Any

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .dates import DateRange
from .movements import summarise_movement_rows

ROW_HEADERS = ["Fecha", "Premio", "Depósito", "Tipo", "Cantidad", "Entidad"]


def _format_quantity(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}".replace(",", " ")
    if isinstance(value, int):
        return f"{value:,}".replace(",", " ")
    return str(value)


def _build_pdf_table(data: list[list[str]], *, header: bool = True) -> Table:
    table = Table(data, hAlign="LEFT", repeatRows=1 if header else 0)
    style = [
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#d7deea")),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
    ]
    if header and data:
        style.extend(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#0b7285")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ]
        )
    table.setStyle(TableStyle(style))
    return table


def build_movement_report_pdf(
    report: dict[str, Any], *, date_range: DateRange | None = None
) -> BytesIO:
    """Renderiza ``report`` (ver ``build_movement_report``) como documento PDF."""

    buffer = BytesIO()
    document = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        leftMargin=36,
        rightMargin=36,
        topMargin=48,
        bottomMargin=36,
    )
    styles = getSampleStyleSheet()
    rows = report.get("rows") or []
    story: list[Any] = [Paragraph("Reporte de movimientos de premios", styles["Title"])]

    last_updated = report.get("lastUpdated")
    story.append(
        Paragraph(f"Actualizado: {last_updated or 'sin datos'}", styles["BodyText"])
    )
    story.append(
        Paragraph((date_range or DateRange()).describe(), styles["BodyText"])
    )
    story.append(Spacer(1, 12))

    summary_rows = [["Tipo", "Movimientos", "Unidades"]]
    for movement_type, totals in summarise_movement_rows(rows).items():
        summary_rows.append(
            [
                movement_type,
                _format_quantity(totals["rows"]),
                _format_quantity(totals["quantity"]),
            ]
        )
    story.append(Paragraph("Resumen", styles["Heading2"]))
    story.append(_build_pdf_table(summary_rows))
    story.append(Spacer(1, 18))

    if rows:
        detail_rows = [list(ROW_HEADERS)]
        for row in rows:
            detail_rows.append(
                [
                    row.get("date", ""),
                    row.get("prizeName", ""),
                    row.get("locationName", ""),
                    row.get("type", ""),
                    _format_quantity(row.get("quantity", 0)),
                    row.get("entity", ""),
                ]
            )
        story.append(Paragraph("Detalle", styles["Heading2"]))
        story.append(_build_pdf_table(detail_rows))
    else:
        story.append(Paragraph("No hay movimientos para el período.", styles["BodyText"]))

    document.build(story)
    buffer.seek(0)
    return buffer


__all__ = ["build_movement_report_pdf"]
