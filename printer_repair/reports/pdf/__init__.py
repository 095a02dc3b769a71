"""
Paquete PDF (documentos del servicio técnico).

Un módulo por documento; las primitivas de maquetación y la numeración de
páginas se comparten.
"""

from .canvas import NumberedCanvas
from .delivery_certificate import render_delivery_certificate
from .intake_receipt import render_intake_receipt
from .layout import Branding, PageCursor
from .listing_report import render_listing_report
from .logo import load_logo

__all__ = [
    "NumberedCanvas",
    "Branding",
    "PageCursor",
    "load_logo",
    "render_intake_receipt",
    "render_delivery_certificate",
    "render_listing_report",
]
