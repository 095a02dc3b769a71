from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

# Colores
COLOR_TEXT = HexColor("#000000")
COLOR_GRAY = HexColor("#6b7280")  # Gris (pie de página)
COLOR_BOX = HexColor("#c8c8c8")  # Recuadro de firma
COLOR_SEPARATOR = HexColor("#dcdcdc")  # Separador entre casos del listado

# Fuentes estándar (sin embeber)
FONT_NORMAL = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

# Geometría de página en milímetros (el origen es la esquina superior izquierda)
PAGE_WIDTH_MM = A4[0] / mm
PAGE_HEIGHT_MM = A4[1] / mm

MARGIN_MM = 20
LISTING_MARGIN_MM = 15

RULE_WIDTH = 0.5
THIN_RULE_WIDTH = 0.3
