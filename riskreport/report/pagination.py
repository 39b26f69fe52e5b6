from __future__ import annotations

from typing import Callable, Sequence

from riskreport.config import PageGeometry
from riskreport.report.diagnostics import BuildDiagnostics
from riskreport.report.surface import Page, ReportFonts

PageDecorator = Callable[[Page], None]


class Paginator:
    """Owns the current page, the vertical cursor and the page registry for one build.

    ``ensure_room`` is the only place that decides whether content still fits; renderers
    call it before every line, row or box and then ``advance`` past what they drew.
    """

    def __init__(
        self,
        *,
        geometry: PageGeometry,
        fonts: ReportFonts,
        diagnostics: BuildDiagnostics | None = None,
        page_decorators: Sequence[PageDecorator] = (),
    ):
        self.geometry = geometry
        self.fonts = fonts
        self.diagnostics = diagnostics if diagnostics is not None else BuildDiagnostics()
        self._page_decorators = tuple(page_decorators)
        self.pages: list[Page] = []
        self._page: Page | None = None
        self._cursor = geometry.top
        self._fresh = False

    @property
    def page(self) -> Page:
        if self._page is None:
            return self.new_page()
        return self._page

    @property
    def cursor(self) -> float:
        return self._cursor

    @property
    def left(self) -> float:
        return self.geometry.margin

    @property
    def right(self) -> float:
        return self.geometry.width - self.geometry.margin

    @property
    def content_width(self) -> float:
        return self.geometry.content_width

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def new_page(self) -> Page:
        page = Page(index=len(self.pages), geometry=self.geometry)
        self.pages.append(page)
        for decorate in self._page_decorators:
            decorate(page)
        self._page = page
        self._cursor = self.geometry.top
        self._fresh = True
        return page

    def remaining(self) -> float:
        if self._page is None:
            return self.geometry.top - self.geometry.bottom
        return self._cursor - self.geometry.bottom

    def ensure_room(self, min_height: float) -> Page:
        if self._page is None:
            return self.new_page()
        if self._cursor - min_height < self.geometry.bottom and not self._fresh:
            return self.new_page()
        return self._page

    def advance(self, amount: float) -> None:
        if amount <= 0:
            return
        self._cursor -= amount
        self._fresh = False

    def move_to(self, y: float) -> None:
        """Place the cursor at an absolute offset on the current page (fixed layouts only)."""
        self._cursor = min(self.geometry.top, y)
        self._fresh = False
