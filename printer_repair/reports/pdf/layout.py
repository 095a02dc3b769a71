"""
Primitivas de maquetación sobre un canvas de ReportLab.

Las posiciones se expresan en milímetros desde la esquina superior izquierda
(como se lee un documento) y se convierten a puntos de PDF al dibujar.
"""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional

from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from .styles import COLOR_TEXT, FONT_NORMAL, PAGE_HEIGHT_MM, PAGE_WIDTH_MM, RULE_WIDTH


@dataclass(frozen=True)
class Branding:
    """Datos fijos del negocio que aparecen en todos los documentos."""
    business_title: str
    contact_line: str
    timezone: str = "America/Bogota"


class PageCursor:
    """
    Cursor vertical sobre un canvas.

    `ensure(space)` es la primitiva de paginación: si el bloque que se va a
    dibujar no cabe antes del margen inferior, abre página nueva y vuelve al
    margen superior.
    """

    def __init__(
        self,
        pdf: Canvas,
        margin: float,
        page_width: float = PAGE_WIDTH_MM,
        page_height: float = PAGE_HEIGHT_MM,
    ):
        self.pdf = pdf
        self.margin = margin
        self.page_width = page_width
        self.page_height = page_height
        self.y = margin

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def center_x(self) -> float:
        return self.page_width / 2

    @property
    def right_x(self) -> float:
        return self.page_width - self.margin

    def ensure(self, space: float) -> bool:
        """Salta de página si no quedan `space` mm. Devuelve True si saltó."""
        if self.y + space > self.bottom:
            self.pdf.showPage()
            self.y = self.margin
            return True
        return False

    def advance(self, dy: float) -> None:
        self.y += dy

    # =========================================================
    # DIBUJO
    # =========================================================

    def _pt_y(self, y: float) -> float:
        return (self.page_height - y) * mm

    def text(
        self,
        text: str,
        x: float,
        font: str = FONT_NORMAL,
        size: float = 10,
        align: str = "left",
        y: Optional[float] = None,
    ) -> None:
        """Dibuja una línea con la línea base en `y` (por defecto, el cursor)."""
        baseline = self._pt_y(self.y if y is None else y)
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(COLOR_TEXT)
        if align == "center":
            self.pdf.drawCentredString(x * mm, baseline, text)
        elif align == "right":
            self.pdf.drawRightString(x * mm, baseline, text)
        else:
            self.pdf.drawString(x * mm, baseline, text)

    def rule(self, color: Color = COLOR_TEXT, width: float = RULE_WIDTH) -> None:
        """Línea horizontal de margen a margen a la altura del cursor."""
        self.pdf.setStrokeColor(color)
        self.pdf.setLineWidth(width)
        y = self._pt_y(self.y)
        self.pdf.line(self.margin * mm, y, self.right_x * mm, y)

    def box(self, x: float, width: float, height: float, color: Color) -> None:
        """Rectángulo sin relleno cuyo borde superior está en el cursor."""
        self.pdf.setStrokeColor(color)
        self.pdf.setLineWidth(RULE_WIDTH)
        self.pdf.rect(x * mm, self._pt_y(self.y + height), width * mm, height * mm, stroke=1, fill=0)

    def image(self, data: bytes, x: float, width: float, height: float) -> None:
        """Imagen cuyo borde superior está en el cursor."""
        self.pdf.drawImage(
            ImageReader(BytesIO(data)),
            x * mm,
            self._pt_y(self.y + height),
            width=width * mm,
            height=height * mm,
        )


# =========================================================
# TEXTO
# =========================================================

def wrap_text(text: str, font: str, size: float, width: float) -> List[str]:
    """
    Parte un texto en líneas que caben en `width` mm.

    Respeta los saltos de línea del texto (las líneas en blanco se conservan
    como ""). Las palabras más anchas que la línea se cortan por caracteres.
    """
    max_pt = width * mm
    lines: List[str] = []

    for paragraph in text.split("\n"):
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(_wrap_paragraph(paragraph, font, size, max_pt))

    return lines


def _wrap_paragraph(paragraph: str, font: str, size: float, max_pt: float) -> List[str]:
    lines: List[str] = []
    current = ""

    for word in paragraph.split():
        candidate = f"{current} {word}" if current else word
        if stringWidth(candidate, font, size) <= max_pt:
            current = candidate
            continue

        if current:
            lines.append(current)
            current = ""

        # Palabra sola demasiado ancha: cortar por caracteres
        while stringWidth(word, font, size) > max_pt:
            cut = _fit_prefix(word, font, size, max_pt)
            lines.append(word[:cut])
            word = word[cut:]
        current = word

    if current:
        lines.append(current)
    return lines


def _fit_prefix(word: str, font: str, size: float, max_pt: float) -> int:
    """Número de caracteres iniciales de `word` que caben (al menos 1)."""
    cut = 1
    while cut < len(word) and stringWidth(word[: cut + 1], font, size) <= max_pt:
        cut += 1
    return cut


def write_lines(
    cursor: PageCursor,
    lines: List[str],
    x: float,
    line_height: float,
    font: str = FONT_NORMAL,
    size: float = 10,
    paginate: bool = True,
) -> None:
    """Dibuja líneas una a una; con `paginate` comprueba espacio antes de cada una."""
    for line in lines:
        if paginate:
            cursor.ensure(line_height)
        if line:
            cursor.text(line, x, font=font, size=size)
        cursor.advance(line_height)
