"""
Registro de ingreso de impresora.

Documento de una sola página que el cliente firma al dejar la impresora.
Las observaciones largas no paginan: se comprimen para que la firma quepa.
"""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional

from reportlab.lib.pagesizes import A4

from printer_repair.core.dates import format_long, format_numeric
from printer_repair.models.case_schemas import CaseOut

from .canvas import NumberedCanvas
from .layout import Branding, PageCursor, wrap_text, write_lines
from .styles import COLOR_BOX, FONT_BOLD, FONT_NORMAL, MARGIN_MM

TITLE = "REGISTRO DE INGRESO DE IMPRESORA"

LOGO_WIDTH = 100
LOGO_HEIGHT = 16

# Altura fija reservada para el bloque de firma y el pie:
# separador (6) + título (12 + 10) + recuadro (25 + 8) + nombre (10)
# + fecha (12) + línea de contacto (8 + 8) = 99, redondeado a 105
SIGNATURE_RESERVE = 105

NOTES_FONT_SIZE = 10
NOTES_SMALL_FONT_SIZE = 9
LINE_HEIGHT = 5
LINE_HEIGHT_REDUCED = 4
MIN_LINE_HEIGHT = 3.5


@dataclass(frozen=True)
class NotesFit:
    lines: List[str]
    font_size: float
    line_height: float

    @property
    def height(self) -> float:
        return len(self.lines) * self.line_height


def fit_notes(text: str, available: float, width: float) -> NotesFit:
    """
    Elige tamaño de letra e interlineado para que las observaciones quepan.

    Orden de preferencia:
    1. 10 pt con interlineado 5 mm
    2. 10 pt con interlineado 4 mm
    3. 9 pt con interlineado available / líneas, si no baja de 3.5 mm
    4. 9 pt con 3.5 mm aunque se desborde
    """
    lines = wrap_text(text, FONT_NORMAL, NOTES_FONT_SIZE, width)

    for line_height in (LINE_HEIGHT, LINE_HEIGHT_REDUCED):
        if len(lines) * line_height <= available:
            return NotesFit(lines, NOTES_FONT_SIZE, line_height)

    small_lines = wrap_text(text, FONT_NORMAL, NOTES_SMALL_FONT_SIZE, width)
    computed = available / len(small_lines) if small_lines else LINE_HEIGHT
    return NotesFit(small_lines, NOTES_SMALL_FONT_SIZE, max(computed, MIN_LINE_HEIGHT))


def render_intake_receipt(
    case: CaseOut,
    branding: Branding,
    logo: Optional[bytes] = None,
    canvasmaker=NumberedCanvas,
) -> bytes:
    """
    Genera el PDF de ingreso.

    Args:
        case: Caso recién creado
        branding: Datos del negocio (pie de página, zona horaria)
        logo: JPEG ya comprimido o None
        canvasmaker: Clase de canvas (tests)

    Returns:
        bytes: Contenido del PDF
    """
    buffer = BytesIO()
    pdf = canvasmaker(buffer, pagesize=A4)
    pdf.setTitle(f"Registro de ingreso - Caso {case.case_number}")
    pdf.setAuthor(branding.business_title)

    cursor = PageCursor(pdf, MARGIN_MM)
    intake_date = format_long(case.intake_at, branding.timezone)

    # Logo centrado (el hueco se reserva aunque no haya logo)
    if logo:
        cursor.image(logo, (cursor.page_width - LOGO_WIDTH) / 2, LOGO_WIDTH, LOGO_HEIGHT)
    cursor.advance(LOGO_HEIGHT + 6)

    cursor.text(TITLE, cursor.center_x, font=FONT_BOLD, size=16, align="center")
    cursor.advance(8)

    cursor.text(f"Número de Caso: {case.case_number}", cursor.right_x, size=10, align="right")
    cursor.advance(6)

    cursor.rule()
    cursor.advance(8)

    rows = [
        ("Referencia:", case.reference),
        ("Cliente:", case.client_name),
        ("NIT/CC:", case.client_tax_id),
        ("Teléfono:", case.phone),
        ("Fecha de Ingreso:", intake_date),
    ]
    for label, value in rows:
        cursor.text(label, cursor.margin, font=FONT_BOLD, size=11)
        cursor.text(str(value), cursor.margin + 50, font=FONT_NORMAL, size=11)
        cursor.advance(7)

    if case.notes and case.notes.strip():
        cursor.advance(3)
        cursor.text("Observaciones:", cursor.margin, font=FONT_BOLD, size=11)
        cursor.advance(5)

        available = cursor.page_height - cursor.margin - cursor.y - SIGNATURE_RESERVE
        fit = fit_notes(case.notes, available, cursor.content_width)
        write_lines(
            cursor,
            fit.lines,
            cursor.margin,
            fit.line_height,
            size=fit.font_size,
            paginate=False,
        )
        cursor.advance(2)

    _draw_signature(cursor, case, branding)

    pdf.save()
    return buffer.getvalue()


def _draw_signature(cursor: PageCursor, case: CaseOut, branding: Branding) -> None:
    cursor.advance(6)
    cursor.rule()
    cursor.advance(12)

    cursor.text("FIRMA DEL CLIENTE", cursor.center_x, font=FONT_BOLD, size=12, align="center")
    cursor.advance(10)

    box_height = 25
    cursor.box(cursor.margin + 20, cursor.content_width - 40, box_height, COLOR_BOX)
    cursor.advance(box_height + 8)

    x = cursor.margin + 20
    cursor.text("Nombre del cliente:", x, size=9)
    cursor.text(case.client_name, x, size=9, y=cursor.y + 5)
    cursor.advance(10)

    cursor.text("Fecha:", x, size=9)
    cursor.text(format_numeric(case.intake_at, branding.timezone), x, size=9, y=cursor.y + 5)
    cursor.advance(12)

    cursor.rule()
    cursor.advance(8)
    cursor.text(branding.contact_line, cursor.center_x, size=8, align="center")
