"""
Listado de impresoras.

Reporte de todos los casos (o del filtro activo) en el orden recibido.
"""
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence

from reportlab.lib.pagesizes import A4

from printer_repair.core.dates import format_day, format_long
from printer_repair.models.case import utcnow
from printer_repair.models.case_schemas import CaseOut, CaseStatus

from .canvas import NumberedCanvas
from .layout import Branding, PageCursor, wrap_text, write_lines
from .styles import (
    COLOR_SEPARATOR,
    FONT_BOLD,
    FONT_ITALIC,
    LISTING_MARGIN_MM,
    THIN_RULE_WIDTH,
)

TITLE = "LISTADO DE IMPRESORAS"

LOGO_WIDTH = 100
LOGO_HEIGHT = 17

DETAIL_INDENT = 3


def render_listing_report(
    cases: Sequence[CaseOut],
    branding: Branding,
    logo: Optional[bytes] = None,
    generated_at: Optional[datetime] = None,
    canvasmaker=NumberedCanvas,
) -> bytes:
    buffer = BytesIO()
    pdf = canvasmaker(buffer, pagesize=A4)
    pdf.setTitle("Listado de impresoras")
    pdf.setAuthor(branding.business_title)

    cursor = PageCursor(pdf, LISTING_MARGIN_MM)
    generated_at = generated_at or utcnow()

    if logo:
        cursor.image(logo, (cursor.page_width - LOGO_WIDTH) / 2, LOGO_WIDTH, LOGO_HEIGHT)
    cursor.advance(LOGO_HEIGHT + 8)

    cursor.text(TITLE, cursor.center_x, font=FONT_BOLD, size=16, align="center")
    cursor.advance(8)

    cursor.text(
        f"Fecha del reporte: {format_long(generated_at, branding.timezone)}",
        cursor.center_x,
        size=9,
        align="center",
    )
    cursor.advance(6)
    cursor.text(f"Total de impresoras: {len(cases)}", cursor.center_x, size=9, align="center")
    cursor.advance(8)

    cursor.rule()
    cursor.advance(8)

    for index, case in enumerate(cases):
        _draw_case(cursor, case, branding)

        if index < len(cases) - 1:
            cursor.advance(2)
            cursor.ensure(3)
            cursor.rule(color=COLOR_SEPARATOR, width=THIN_RULE_WIDTH)
            cursor.advance(5)

    cursor.ensure(15)
    cursor.advance(5)
    cursor.rule()
    cursor.advance(8)
    cursor.text(branding.contact_line, cursor.center_x, size=8, align="center")

    pdf.save()
    return buffer.getvalue()


def _draw_case(cursor: PageCursor, case: CaseOut, branding: Branding) -> None:
    # Cabecera del caso con al menos sus datos básicos en la misma página
    cursor.ensure(40)
    cursor.text(f"#{case.case_number} - {case.reference}", cursor.margin, font=FONT_BOLD, size=10)
    cursor.advance(5)

    x = cursor.margin + DETAIL_INDENT
    details = [
        f"Cliente: {case.client_name}",
        f"NIT/CC: {case.client_tax_id}",
        f"Teléfono: {case.phone}",
        f"Fecha Ingreso: {format_day(case.intake_at, branding.timezone)}",
        f"Estado: {CaseStatus(case.status).label}",
    ]
    write_lines(cursor, details, x, 5, size=9)

    if case.notes and case.notes.strip():
        cursor.ensure(10)
        lines = wrap_text(
            f"Observaciones: {case.notes}",
            FONT_ITALIC,
            8,
            cursor.content_width - 2 * DETAIL_INDENT,
        )
        write_lines(cursor, lines, x, 4, font=FONT_ITALIC, size=8)
