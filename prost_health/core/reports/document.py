"""
Report Document Model

A data-only description of the screening request: ordered sections made of
label/value rows and blocks. It carries no fonts, colours or coordinates;
a DocumentRenderer turns it into bytes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class BlockKind(str, Enum):
    BADGE   = "badge"      # risk tier pill
    TEXT    = "text"       # plain paragraph
    BULLETS = "bullets"    # titled bullet list
    WARNING = "warning"    # highlighted call-out
    NOTE    = "note"       # muted clinical note


@dataclass(frozen=True)
class Row:
    label: str
    value: str


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    text: str = ""
    title: str = ""
    items: Tuple[str, ...] = ()
    tone: Optional[str] = None       # e.g. "LOW" / "HIGH" for badge colouring


SectionItem = Union[Row, Block]


@dataclass(frozen=True)
class Section:
    key: str
    title: str
    items: Tuple[SectionItem, ...] = ()

    @property
    def rows(self) -> List[Row]:
        return [i for i in self.items if isinstance(i, Row)]

    @property
    def blocks(self) -> List[Block]:
        return [i for i in self.items if isinstance(i, Block)]

    def value(self, label: str) -> Optional[str]:
        for row in self.rows:
            if row.label == label:
                return row.value
        return None


@dataclass(frozen=True)
class ReportHeader:
    brand: str
    tagline: str
    title: str
    subtitle: str
    contact: Tuple[str, ...]
    date_issued: str
    reference_id: str


@dataclass(frozen=True)
class ReportFooter:
    generated: str
    reference_id: str
    company: str
    notice: str = "This document is confidential"


@dataclass(frozen=True)
class ReportDocument:
    """
    Header, body sections in fixed order, and a footer repeated on every page.
    """
    header: ReportHeader
    sections: Tuple[Section, ...]
    footer: ReportFooter
    title: str = ""
    author: str = ""
    keywords: Tuple[str, ...] = field(default_factory=tuple)

    def section(self, key: str) -> Section:
        for s in self.sections:
            if s.key == key:
                return s
        raise KeyError(key)

    def iter_text(self):
        """Every visible string, in reading order."""
        h = self.header
        yield from (h.brand, h.tagline, h.title, h.subtitle, *h.contact, h.date_issued, h.reference_id)
        for s in self.sections:
            yield s.title
            for item in s.items:
                if isinstance(item, Row):
                    yield item.label
                    yield item.value
                else:
                    if item.title:
                        yield item.title
                    if item.text:
                        yield item.text
                    yield from item.items
        f = self.footer
        yield from (f.generated, f.reference_id, f.company, f.notice)
