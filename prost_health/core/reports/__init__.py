"""
Report Generation Module

Builds the downloadable "Screening Request" PDF: a data-only document
description composed from the intake answers and risk assessment, rendered
to A4 by reportlab.
"""
from .composer import ReportComposer, ComposedReport
from .document import ReportDocument, Section, Row, Block, BlockKind
from .renderer import DocumentRenderer, ReportLabRenderer

__all__ = [
    "ReportComposer",
    "ComposedReport",
    "ReportDocument",
    "Section",
    "Row",
    "Block",
    "BlockKind",
    "DocumentRenderer",
    "ReportLabRenderer",
]
