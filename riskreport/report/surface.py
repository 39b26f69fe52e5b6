from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas as rl_canvas

from riskreport.config import PageGeometry, Settings
from riskreport.report.palette import BLACK
from riskreport.report.text import WidthFn, font_width_fn, sanitize_pdf_text

logger = logging.getLogger(__name__)

CanvasOp = Callable[[rl_canvas.Canvas], None]


class ReportBuildError(RuntimeError):
    """Raised when the document itself cannot be produced."""


@dataclass(frozen=True)
class ReportFonts:
    regular: str
    bold: str

    def width_fn(self, *, bold: bool = False) -> WidthFn:
        return font_width_fn(self.bold if bold else self.regular)

    def width(self, text: str, size: float, *, bold: bool = False) -> float:
        return pdfmetrics.stringWidth(sanitize_pdf_text(text), self.bold if bold else self.regular, size)


def _register_ttf_font(font_name: str, font_path: Path) -> None:
    if font_name in pdfmetrics.getRegisteredFontNames():
        return
    try:
        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
    except Exception as exc:
        raise ReportBuildError(f'Failed to embed PDF font {font_name} from {font_path}: {exc}') from exc


def _require_font(font_name: str) -> None:
    try:
        pdfmetrics.getFont(font_name)
    except Exception as exc:
        raise ReportBuildError(f'PDF font {font_name!r} is not available: {exc}') from exc


def resolve_report_fonts(settings: Settings) -> ReportFonts:
    regular = str(settings.pdf_font_regular or '').strip() or 'Helvetica'
    bold = str(settings.pdf_font_bold or '').strip() or 'Helvetica-Bold'
    if settings.pdf_font_regular_path is not None:
        _register_ttf_font(regular, settings.pdf_font_regular_path)
    if settings.pdf_font_bold_path is not None:
        _register_ttf_font(bold, settings.pdf_font_bold_path)
    _require_font(regular)
    _require_font(bold)
    return ReportFonts(regular=regular, bold=bold)


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    font: str
    size: float


@dataclass
class Page:
    """One fixed-size page. Draw calls are recorded and replayed at serialization time."""

    index: int
    geometry: PageGeometry
    _ops: list[CanvasOp] = field(default_factory=list, repr=False)
    texts: list[TextRun] = field(default_factory=list, repr=False)

    def draw_text(
        self,
        text: object,
        *,
        x: float,
        y: float,
        font: str,
        size: float,
        color: colors.Color = BLACK,
        opacity: float | None = None,
        rotate: float | None = None,
    ) -> str:
        safe = sanitize_pdf_text(text)
        if not safe:
            return safe
        self.texts.append(TextRun(x=x, y=y, text=safe, font=font, size=size))

        def _op(canvas: rl_canvas.Canvas) -> None:
            canvas.saveState()
            canvas.setFillColor(color)
            if opacity is not None:
                canvas.setFillAlpha(opacity)
            canvas.setFont(font, size)
            if rotate:
                canvas.translate(x, y)
                canvas.rotate(rotate)
                canvas.drawString(0, 0, safe)
            else:
                canvas.drawString(x, y, safe)
            canvas.restoreState()

        self._ops.append(_op)
        return safe

    def draw_rect(
        self,
        *,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: colors.Color | None = None,
        stroke: colors.Color | None = None,
        stroke_width: float = 1.0,
    ) -> None:
        def _op(canvas: rl_canvas.Canvas) -> None:
            canvas.saveState()
            if fill is not None:
                canvas.setFillColor(fill)
            if stroke is not None:
                canvas.setStrokeColor(stroke)
                canvas.setLineWidth(stroke_width)
            canvas.rect(x, y, width, height, stroke=int(stroke is not None), fill=int(fill is not None))
            canvas.restoreState()

        self._ops.append(_op)

    def draw_line(
        self,
        *,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: colors.Color = BLACK,
        width: float = 1.0,
    ) -> None:
        def _op(canvas: rl_canvas.Canvas) -> None:
            canvas.saveState()
            canvas.setStrokeColor(color)
            canvas.setLineWidth(width)
            canvas.line(x1, y1, x2, y2)
            canvas.restoreState()

        self._ops.append(_op)

    def draw_image(self, image: ImageReader, *, x: float, y: float, width: float, height: float) -> None:
        def _op(canvas: rl_canvas.Canvas) -> None:
            try:
                canvas.drawImage(image, x, y, width=width, height=height, mask='auto')
            except Exception as exc:
                logger.warning('Failed to draw image on page %s: %s', self.index + 1, exc)

        self._ops.append(_op)

    def plain_text(self) -> str:
        return '\n'.join(run.text for run in self.texts)

    def render(self, canvas: rl_canvas.Canvas) -> None:
        for op in self._ops:
            op(canvas)


def serialize_pages(
    pages: list[Page],
    *,
    geometry: PageGeometry,
    title: str,
    author: str,
    producer: str,
) -> bytes:
    if not pages:
        raise ReportBuildError('Cannot serialize a report without pages')

    buffer = io.BytesIO()
    try:
        canvas = rl_canvas.Canvas(buffer, pagesize=(geometry.width, geometry.height))
        canvas.setTitle(sanitize_pdf_text(title))
        canvas.setAuthor(sanitize_pdf_text(author))
        canvas.setProducer(producer)
        for page in pages:
            page.render(canvas)
            canvas.showPage()
        canvas.save()
    except ReportBuildError:
        raise
    except Exception as exc:
        raise ReportBuildError(f'Failed to serialize report PDF: {exc}') from exc
    return buffer.getvalue()
