"""
Acta de entrega y garantía.

Se emite cuando el caso pasa a resuelto. A diferencia del registro de
ingreso, este documento pagina: observaciones o motivos largos empujan las
secciones siguientes a páginas nuevas y el bloque de firma nunca se parte.
"""
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import A4

from printer_repair.core.dates import format_long
from printer_repair.models.case import utcnow
from printer_repair.models.case_schemas import CaseOut

from .canvas import NumberedCanvas
from .layout import Branding, PageCursor, wrap_text, write_lines
from .styles import COLOR_BOX, FONT_BOLD, FONT_NORMAL, MARGIN_MM

TITLE = "ACTA DE ENTREGA Y GARANTÍA"

LOGO_WIDTH = 120
LOGO_HEIGHT = 20

WARRANTY_DAYS = 30

SIGNATURE_BOX_HEIGHT = 35
# Recuadro (35 + 10), nombre (12) y fecha: la última línea queda 63 mm bajo el borde del recuadro
SIGNATURE_BLOCK_HEIGHT = 65


def confirmation_text(case: CaseOut) -> str:
    return (
        f"Por medio del presente documento, {case.client_name} con identificación "
        f"{case.client_tax_id}, confirma que ha recibido la impresora {case.reference} "
        "en perfecto estado de funcionamiento y acepta las condiciones de garantía "
        "establecidas."
    )


def warranty_text(case: CaseOut) -> str:
    return (
        f"Se otorga garantía de {WARRANTY_DAYS} días calendario sobre el trabajo "
        f"realizado en la impresora {case.reference}, contados a partir de la fecha "
        "de entrega. Esta garantía cubre los defectos de fabricación o reparación "
        "relacionados con el servicio técnico prestado. La garantía no cubre daños "
        "causados por mal uso, accidentes, o modificaciones no autorizadas."
    )


def render_delivery_certificate(
    case: CaseOut,
    branding: Branding,
    logo: Optional[bytes] = None,
    canvasmaker=NumberedCanvas,
    now: Optional[datetime] = None,
) -> bytes:
    """
    Genera el PDF del acta de entrega.

    Si el caso no tiene fecha de entrega se usa `now` (UTC).
    """
    buffer = BytesIO()
    pdf = canvasmaker(buffer, pagesize=A4)
    pdf.setTitle(f"Acta de entrega - Caso {case.case_number}")
    pdf.setAuthor(branding.business_title)

    cursor = PageCursor(pdf, MARGIN_MM)
    delivered_at = case.delivered_at or now or utcnow()
    delivery_date = format_long(delivered_at, branding.timezone)

    # -------- Cabecera --------
    if logo:
        cursor.image(logo, (cursor.page_width - LOGO_WIDTH) / 2, LOGO_WIDTH, LOGO_HEIGHT)
    cursor.advance(LOGO_HEIGHT + 10)

    cursor.text(TITLE, cursor.center_x, font=FONT_BOLD, size=18, align="center")
    cursor.advance(10)

    cursor.text(f"Número de Caso: {case.case_number}", cursor.right_x, size=10, align="right")
    cursor.advance(8)

    cursor.rule()
    cursor.advance(10)

    # -------- Datos del caso --------
    rows = [
        ("Referencia de la Impresora:", case.reference),
        ("Cliente:", case.client_name),
        ("NIT/CC:", case.client_tax_id),
        ("Teléfono:", case.phone),
        ("Fecha de Ingreso:", format_long(case.intake_at, branding.timezone)),
        ("Fecha de Entrega:", delivery_date),
    ]
    for label, value in rows:
        cursor.ensure(8)
        cursor.text(label, cursor.margin, font=FONT_BOLD, size=12)
        cursor.text(str(value), cursor.margin + 60, size=12)
        cursor.advance(8)

    if case.notes and case.notes.strip():
        cursor.ensure(20)
        cursor.advance(5)
        cursor.text("Observaciones:", cursor.margin, font=FONT_BOLD, size=12)
        cursor.advance(6)
        lines = wrap_text(case.notes, FONT_NORMAL, 11, cursor.content_width)
        write_lines(cursor, lines, cursor.margin, 6, size=11)
        cursor.advance(10)

    _section(cursor, "CONFIRMACIÓN DE RECEPCIÓN", confirmation_text(case), after=10)
    _section(cursor, "DECLARACIÓN DE GARANTÍA", warranty_text(case), after=15)

    if case.resolution_note and case.resolution_note.strip():
        _section(cursor, "MOTIVO DE RESOLUCIÓN", case.resolution_note, after=10)

    _draw_signature(cursor, case, delivery_date)

    # -------- Pie --------
    cursor.ensure(20)
    cursor.rule()
    cursor.advance(10)
    cursor.text(branding.contact_line, cursor.center_x, size=9, align="center")

    pdf.save()
    return buffer.getvalue()


def _section(cursor: PageCursor, heading: str, body: str, after: float) -> None:
    """Título en negrita seguido de un párrafo que pagina línea a línea."""
    cursor.ensure(30)
    cursor.advance(5)
    cursor.text(heading, cursor.margin, font=FONT_BOLD, size=11)
    cursor.advance(8)
    lines = wrap_text(body, FONT_NORMAL, 10, cursor.content_width)
    write_lines(cursor, lines, cursor.margin, 5, size=10)
    cursor.advance(after)


def _draw_signature(cursor: PageCursor, case: CaseOut, delivery_date: str) -> None:
    # Separador y título viajan juntos
    cursor.ensure(35)
    cursor.rule()
    cursor.advance(20)
    cursor.text("FIRMA DEL CLIENTE", cursor.center_x, font=FONT_BOLD, size=14, align="center")
    cursor.advance(15)

    # Recuadro, nombre y fecha nunca se separan
    cursor.ensure(SIGNATURE_BLOCK_HEIGHT)
    cursor.box(cursor.margin + 20, cursor.content_width - 40, SIGNATURE_BOX_HEIGHT, COLOR_BOX)
    cursor.advance(SIGNATURE_BOX_HEIGHT + 10)

    x = cursor.margin + 20
    cursor.text("Nombre del cliente:", x, size=10)
    cursor.text(case.client_name, x, size=10, y=cursor.y + 6)
    cursor.advance(12)

    cursor.text("Fecha:", x, size=10)
    cursor.text(delivery_date, x, size=10, y=cursor.y + 6)
    cursor.advance(15)
