from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from .styles import COLOR_GRAY, FONT_NORMAL


class NumberedCanvas(canvas.Canvas):
    """
    Canvas con doble pasada para numeración correcta.

    ReportLab no conoce el total de páginas hasta el final:
    1. Primera: guardar estados de cada página
    2. Segunda: renderizar con total de páginas conocido

    Los documentos de una sola página no llevan numeración.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        """Primera pasada: guardar estado sin renderizar número."""
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        """Segunda pasada: renderizar TODAS las páginas con total correcto."""
        # La última página sigue abierta (nadie llamó a showPage)
        self._saved_page_states.append(dict(self.__dict__))
        num_pages = len(self._saved_page_states)

        for state in self._saved_page_states:
            self.__dict__.update(state)
            if num_pages > 1:
                self.draw_page_number(num_pages)
            super().showPage()

        super().save()

    def draw_page_number(self, page_count: int) -> None:
        """Número de página (inferior derecha), dentro del margen inferior."""
        self.saveState()
        self.setFont(FONT_NORMAL, 8)
        self.setFillColor(COLOR_GRAY)
        page_number_text = f"Página {self._pageNumber} de {page_count}"
        self.drawRightString(A4[0] - 2 * cm, 1 * cm, page_number_text)
        self.restoreState()
