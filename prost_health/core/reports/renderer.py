"""
Document Renderers

Turns a ReportDocument into PDF bytes. There is one production renderer,
built on reportlab's platypus layout engine; the DocumentRenderer base class
is the seam tests use to substitute a failing or recording renderer.
"""
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Callable, List
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor, white
from reportlab.lib.enums import TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
    Flowable, KeepTogether,
)

from prost_health.utils import get_logger
from .document import Block, BlockKind, ReportDocument, Row, Section

logger = get_logger(__name__)

# Brand palette (navy & gold)
BRAND_DARK = HexColor("#0F172A")
BRAND_ACCENT = HexColor("#D97706")
TEXT_MAIN = HexColor("#1E293B")
TEXT_MUTED = HexColor("#64748B")
TEXT_LIGHT = HexColor("#94A3B8")
BORDER = HexColor("#E2E8F0")
ROW_LABEL_BG = HexColor("#F8FAFC")

# Risk tier colours: (text/border, background)
TIER_COLORS = {
    "LOW": (HexColor("#10B981"), HexColor("#ECFDF5")),
    "MEDIUM": (HexColor("#F59E0B"), HexColor("#FFFBEB")),
    "HIGH": (HexColor("#EF4444"), HexColor("#FEF2F2")),
}

# Row values longer than this leave the label/value table
LONG_VALUE_CHARS = 300


class DocumentRenderer(ABC):
    """Typesets a ReportDocument. Implementations must not touch disk or network."""

    name: str = "abstract"

    @abstractmethod
    def render(self, document: ReportDocument) -> bytes:
        """Return the complete document as bytes."""


class RiskBadge(Flowable):
    """Rounded pill showing the risk tier."""

    def __init__(self, label: str, tone: str, width: float = 60 * mm, height: float = 12 * mm):
        Flowable.__init__(self)
        self.label = label
        self.tone = tone
        self.width = width
        self.height = height

    def draw(self):
        fg, bg = TIER_COLORS.get(self.tone, (TEXT_MUTED, ROW_LABEL_BG))

        self.canv.setFillColor(bg)
        self.canv.setStrokeColor(fg)
        self.canv.roundRect(0, 0, self.width, self.height, 6, fill=1, stroke=1)

        self.canv.setFillColor(fg)
        self.canv.setFont("Helvetica-Bold", 14)
        text_width = self.canv.stringWidth(self.label, "Helvetica-Bold", 14)
        self.canv.drawString((self.width - text_width) / 2, self.height / 2 - 5, self.label)


class ReportLabRenderer(DocumentRenderer):
    """
    A4 PDF renderer.

    Output is byte-for-byte reproducible for identical documents: reportlab
    runs in invariant mode, which pins the creation date and document ID.
    """

    name = "reportlab"

    def __init__(self, pagesize=A4, margin: float = 18 * mm):
        self.pagesize = pagesize
        self.margin = margin
        self._styles = getSampleStyleSheet()
        self._create_custom_styles()

    @property
    def content_width(self) -> float:
        return self.pagesize[0] - 2 * self.margin

    def _create_custom_styles(self):
        """Create custom paragraph styles."""
        self._styles.add(ParagraphStyle(
            name='Brand',
            parent=self._styles['Title'],
            fontSize=20,
            leading=24,
            textColor=white,
            alignment=TA_LEFT,
            fontName='Helvetica-Bold',
            spaceAfter=2,
        ))

        self._styles.add(ParagraphStyle(
            name='Tagline',
            parent=self._styles['Normal'],
            fontSize=7,
            textColor=BRAND_ACCENT,
            fontName='Helvetica-Bold',
        ))

        self._styles.add(ParagraphStyle(
            name='HeaderMeta',
            parent=self._styles['Normal'],
            fontSize=9,
            leading=12,
            textColor=white,
            alignment=TA_RIGHT,
            fontName='Courier',
        ))

        self._styles.add(ParagraphStyle(
            name='HeaderMetaLabel',
            parent=self._styles['Normal'],
            fontSize=6,
            textColor=TEXT_LIGHT,
            alignment=TA_RIGHT,
        ))

        self._styles.add(ParagraphStyle(
            name='DocTitle',
            parent=self._styles['Heading1'],
            fontSize=16,
            spaceBefore=10,
            spaceAfter=2,
            textColor=BRAND_DARK,
            fontName='Helvetica-Bold',
        ))

        self._styles.add(ParagraphStyle(
            name='DocSubtitle',
            parent=self._styles['Normal'],
            fontSize=9,
            textColor=TEXT_MUTED,
            spaceAfter=6,
        ))

        self._styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self._styles['Heading2'],
            fontSize=12,
            spaceBefore=12,
            spaceAfter=6,
            textColor=BRAND_DARK,
            fontName='Helvetica-Bold',
        ))

        self._styles.add(ParagraphStyle(
            name='Cell',
            parent=self._styles['Normal'],
            fontSize=9,
            leading=12,
            textColor=TEXT_MAIN,
        ))

        self._styles.add(ParagraphStyle(
            name='CellLabel',
            parent=self._styles['Cell'],
            fontName='Helvetica-Bold',
            textColor=TEXT_MUTED,
        ))

        self._styles.add(ParagraphStyle(
            name='Body',
            parent=self._styles['Normal'],
            fontSize=9,
            leading=13,
            textColor=TEXT_MAIN,
            spaceAfter=4,
        ))

        self._styles.add(ParagraphStyle(
            name='ReportBullet',
            parent=self._styles['Body'],
            leftIndent=10,
            bulletIndent=0,
        ))

        self._styles.add(ParagraphStyle(
            name='Note',
            parent=self._styles['Body'],
            fontName='Helvetica-Oblique',
            textColor=TEXT_MUTED,
        ))

        self._styles.add(ParagraphStyle(
            name='WarningTitle',
            parent=self._styles['Body'],
            fontName='Helvetica-Bold',
            textColor=TIER_COLORS["HIGH"][0],
        ))

    # ── Entry point ──────────────────────────────────────────────────────────

    def render(self, document: ReportDocument) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.pagesize,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin + 12 * mm,
            title=document.title,
            author=document.author,
            creator=document.author,
            subject=document.header.subtitle,
            keywords=", ".join(document.keywords),
            invariant=1,
        )

        story: List[Flowable] = []
        story.extend(self._header(document))
        for section in document.sections:
            flowables = self._section(section)
            if any(self._is_long(r) for r in section.rows):
                story.extend(flowables)
            else:
                story.append(KeepTogether(flowables))

        footer = self._footer_painter(document)
        doc.build(story, onFirstPage=footer, onLaterPages=footer)

        pdf = buffer.getvalue()
        logger.debug(f"ReportLabRenderer: {len(pdf)} bytes, {len(document.sections)} section(s)")
        return pdf

    # ── Header ───────────────────────────────────────────────────────────────

    def _p(self, text: str, style: str) -> Paragraph:
        return Paragraph(escape(text), self._styles[style])

    def _header(self, document: ReportDocument) -> List[Flowable]:
        h = document.header
        left = [
            self._p(h.brand, 'Brand'),
            self._p(h.tagline.upper(), 'Tagline'),
        ]
        right = [
            self._p("REFERRAL REFERENCE", 'HeaderMetaLabel'),
            self._p(h.reference_id, 'HeaderMeta'),
            Spacer(1, 4),
            self._p("DATE ISSUED", 'HeaderMetaLabel'),
            self._p(h.date_issued.upper(), 'HeaderMeta'),
        ]
        banner = Table(
            [[left, right]],
            colWidths=[self.content_width * 0.6, self.content_width * 0.4],
        )
        banner.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), BRAND_DARK),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 12),
            ('RIGHTPADDING', (0, 0), (-1, -1), 12),
            ('TOPPADDING', (0, 0), (-1, -1), 12),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 12),
            ('LINEBELOW', (0, 0), (-1, -1), 3, BRAND_ACCENT),
        ]))

        flowables: List[Flowable] = [
            banner,
            self._p(h.title, 'DocTitle'),
            self._p(h.subtitle, 'DocSubtitle'),
        ]
        if h.contact:
            flowables.append(self._p(" | ".join(h.contact), 'DocSubtitle'))
        return flowables

    # ── Sections ─────────────────────────────────────────────────────────────

    def _section(self, section: Section) -> List[Flowable]:
        flowables: List[Flowable] = [self._p(section.title, 'SectionHeader')]
        pending_rows: List[Row] = []

        for item in section.items:
            if isinstance(item, Row) and not self._is_long(item):
                pending_rows.append(item)
                continue
            if pending_rows:
                flowables.append(self._rows_table(pending_rows))
                pending_rows = []
            if isinstance(item, Row):
                flowables.extend(self._long_row(item))
            else:
                flowables.extend(self._block(item))

        if pending_rows:
            flowables.append(self._rows_table(pending_rows))
        return flowables

    @staticmethod
    def _is_long(row: Row) -> bool:
        return len(row.value) > LONG_VALUE_CHARS or "\n" in row.value

    def _long_row(self, row: Row) -> List[Flowable]:
        # Table rows cannot split across pages; free text flows as paragraphs instead
        flowables: List[Flowable] = [Spacer(1, 4), self._p(row.label, 'CellLabel')]
        for line in row.value.splitlines():
            if line.strip():
                flowables.append(self._p(line.strip(), 'Body'))
        return flowables

    def _rows_table(self, rows: List[Row]) -> Table:
        data = [[self._p(r.label, 'CellLabel'), self._p(r.value, 'Cell')] for r in rows]
        table = Table(data, colWidths=[self.content_width * 0.4, self.content_width * 0.6])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), ROW_LABEL_BG),
            ('GRID', (0, 0), (-1, -1), 0.5, BORDER),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ]))
        return table

    def _block(self, block: Block) -> List[Flowable]:
        if block.kind is BlockKind.BADGE:
            return [RiskBadge(block.text, block.tone or ""), Spacer(1, 6)]

        if block.kind is BlockKind.TEXT:
            return [self._p(block.text, 'Body')]

        if block.kind is BlockKind.NOTE:
            return [self._p(block.text, 'Note')]

        if block.kind is BlockKind.BULLETS:
            flowables: List[Flowable] = []
            if block.title:
                flowables.append(Paragraph(f"<b>{escape(block.title)}</b>", self._styles['Body']))
            for entry in block.items:
                flowables.append(Paragraph(escape(entry), self._styles['ReportBullet'], bulletText="•"))
            return flowables

        if block.kind is BlockKind.WARNING:
            fg, bg = TIER_COLORS["HIGH"]
            box = Table(
                [[[self._p(block.title, 'WarningTitle'),
                   self._p(block.text, 'Body')]]],
                colWidths=[self.content_width],
            )
            box.setStyle(TableStyle([
                ('BACKGROUND', (0, 0), (-1, -1), bg),
                ('BOX', (0, 0), (-1, -1), 1, fg),
                ('LEFTPADDING', (0, 0), (-1, -1), 10),
                ('RIGHTPADDING', (0, 0), (-1, -1), 10),
                ('TOPPADDING', (0, 0), (-1, -1), 8),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ]))
            return [Spacer(1, 6), box]

        raise ValueError(f"Unsupported block kind: {block.kind}")

    # ── Footer ───────────────────────────────────────────────────────────────

    def _footer_painter(self, document: ReportDocument) -> Callable:
        f = document.footer

        def paint(canvas, doc):
            canvas.saveState()
            width, _ = self.pagesize
            y = self.margin

            canvas.setStrokeColor(BORDER)
            canvas.line(self.margin, y + 20, width - self.margin, y + 20)

            canvas.setFont("Helvetica", 7)
            canvas.setFillColor(TEXT_MUTED)
            canvas.drawString(self.margin, y + 10, f"Generated: {f.generated}")
            canvas.drawString(self.margin, y, f"Reference: {f.reference_id}")
            canvas.drawRightString(width - self.margin, y + 10, f.company)
            canvas.drawRightString(width - self.margin, y, f.notice)
            canvas.drawCentredString(width / 2, y, f"Page {canvas.getPageNumber()}")

            canvas.restoreState()

        return paint
