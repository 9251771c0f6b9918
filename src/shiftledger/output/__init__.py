"""Output generation for weekly plans and audits (PDF, text)."""

from shiftledger.output.debug_generator import DebugGenerator
from shiftledger.output.pdf_generator import PDFGenerator

__all__ = [
    "DebugGenerator",
    "PDFGenerator",
]
