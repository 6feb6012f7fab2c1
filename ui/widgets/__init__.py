from .pdf_display import BackgroundClickFilter, PDFDisplayLabel
from .latex_annotation import LatexAnnotationWidget
from .sidebar import SidebarWidget

__all__ = [
    "BackgroundClickFilter",
    "PDFDisplayLabel",
    "LatexAnnotationWidget",
    "SidebarWidget",
]
