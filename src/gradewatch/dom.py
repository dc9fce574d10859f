# Copyright (c) Syntropy Systems
"""Observable HTML documents and table structure helpers.

`Page` wraps a BeautifulSoup tree and reports every structural or text change
to its observers, the way a browser MutationObserver would. Everything above
this module only sees the `ObservableDocument` protocol.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Literal, Protocol

from bs4 import BeautifulSoup, NavigableString, Tag

if TYPE_CHECKING:
    from bs4 import PageElement

MutationKind = Literal["childList", "characterData"]

HTML_PARSER = "html.parser"


@dataclass(frozen=True)
class MutationRecord:
    """A single change to the document."""

    kind: MutationKind
    target: PageElement


MutationCallback = Callable[[list[MutationRecord]], None]


class Subscription(Protocol):
    def disconnect(self) -> None:
        ...


class ObservableDocument(Protocol):
    """What the controller needs from the host page."""

    @property
    def body(self) -> Tag:
        ...

    def tables(self) -> list[Tag]:
        ...

    def contains(self, node: PageElement) -> bool:
        ...

    def observe(
        self,
        target: Tag,
        callback: MutationCallback,
        *,
        child_list: bool = True,
        character_data: bool = False,
        subtree: bool = True,
    ) -> Subscription:
        ...


@dataclass(eq=False)
class _Observer:
    page: Page
    target: Tag
    callback: MutationCallback
    child_list: bool
    character_data: bool
    subtree: bool
    pending: list[MutationRecord] = field(default_factory=list)

    def wants(self, record: MutationRecord) -> bool:
        if record.kind == "childList" and not self.child_list:
            return False
        if record.kind == "characterData" and not self.character_data:
            return False
        if record.target is self.target:
            return True
        if not self.subtree:
            return False
        return any(parent is self.target for parent in record.target.parents)

    def disconnect(self) -> None:
        self.page._detach(self)


class Page:
    """An HTML document that notifies observers when it is mutated."""

    def __init__(self, markup: str = "", parser: str = HTML_PARSER) -> None:
        self.parser = parser
        self.soup = BeautifulSoup(markup, parser)
        self._observers: list[_Observer] = []
        self._batch_depth = 0

    @property
    def body(self) -> Tag:
        body = self.soup.body
        return body if body is not None else self.soup

    def tables(self) -> list[Tag]:
        return list(self.soup.find_all("table"))

    def contains(self, node: PageElement) -> bool:
        if node is self.soup:
            return True
        return any(parent is self.soup for parent in node.parents)

    # --- Observation ---

    def observe(
        self,
        target: Tag,
        callback: MutationCallback,
        *,
        child_list: bool = True,
        character_data: bool = False,
        subtree: bool = True,
    ) -> Subscription:
        """Call `callback` with the records of every matching mutation."""
        observer = _Observer(
            page=self,
            target=target,
            callback=callback,
            child_list=child_list,
            character_data=character_data,
            subtree=subtree,
        )
        self._observers.append(observer)
        return observer

    def _detach(self, observer: _Observer) -> None:
        self._observers = [o for o in self._observers if o is not observer]
        observer.pending.clear()

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Deliver the records of all mutations inside the block at once."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    def _record(self, kind: MutationKind, target: PageElement) -> None:
        record = MutationRecord(kind=kind, target=target)
        for observer in list(self._observers):
            if observer.wants(record):
                observer.pending.append(record)
        if self._batch_depth == 0:
            self._flush()

    def _flush(self) -> None:
        for observer in list(self._observers):
            if not observer.pending:
                continue
            records = observer.pending
            observer.pending = []
            observer.callback(records)

    # --- Mutation ---

    def _fragment(self, markup: str) -> list[PageElement]:
        fragment = BeautifulSoup(markup, self.parser)
        root = fragment.body if fragment.body is not None else fragment
        return [child.extract() for child in list(root.contents)]

    def append_html(self, parent: Tag, markup: str) -> None:
        """Parse `markup` and append the resulting nodes to `parent`."""
        nodes = self._fragment(markup)
        if not nodes:
            return
        for node in nodes:
            parent.append(node)
        self._record("childList", parent)

    def remove(self, node: PageElement) -> None:
        parent = node.parent
        node.extract()
        if parent is not None:
            self._record("childList", parent)

    def set_text(self, element: Tag, text: str) -> None:
        """Replace the text of `element`.

        A lone text child is edited in place and reported as characterData;
        anything else is replaced wholesale and reported as childList.
        """
        children = list(element.contents)
        if len(children) == 1 and isinstance(children[0], NavigableString):
            replacement = NavigableString(text)
            children[0].replace_with(replacement)
            self._record("characterData", replacement)
            return
        element.clear()
        element.append(NavigableString(text))
        self._record("childList", element)

    def replace_html(self, markup: str) -> None:
        """Swap the whole body for the body of `markup`."""
        nodes = self._fragment(markup)
        body = self.body
        with self.batch():
            if body.contents:
                body.clear()
                self._record("childList", body)
            for node in nodes:
                body.append(node)
            if nodes:
                self._record("childList", body)


# --- Table structure ---


def _children(tag: Tag, *names: str) -> list[Tag]:
    return [child for child in tag.children if isinstance(child, Tag) and child.name in names]


def table_bodies(table: Tag) -> list[Tag]:
    return _children(table, "tbody")


def table_rows(table: Tag) -> list[Tag]:
    """Rows in table order: header rows, body and bare rows, footer rows."""
    head: list[Tag] = []
    middle: list[Tag] = []
    foot: list[Tag] = []
    for child in _children(table, "thead", "tbody", "tfoot", "tr"):
        if child.name == "tr":
            middle.append(child)
        elif child.name == "thead":
            head.extend(_children(child, "tr"))
        elif child.name == "tfoot":
            foot.extend(_children(child, "tr"))
        else:
            middle.extend(_children(child, "tr"))
    return head + middle + foot


def row_cells(row: Tag) -> list[Tag]:
    return _children(row, "td", "th")


def header_cells(table: Tag) -> list[Tag]:
    """Cells of the header row: the first <thead> row, else the first row."""
    heads = _children(table, "thead")
    if heads:
        head_rows = _children(heads[0], "tr")
        if head_rows:
            return row_cells(head_rows[0])
    rows = table_rows(table)
    return row_cells(rows[0]) if rows else []


def data_rows(table: Tag) -> list[Tag]:
    """Rows holding course data: every <tbody> row, else all rows but the first."""
    bodies = table_bodies(table)
    if bodies:
        return [row for body in bodies for row in _children(body, "tr")]
    rows = table_rows(table)
    return rows[1:] if len(rows) > 1 else []


def body_region(table: Tag) -> Tag:
    """The part of the table that changes when rows load."""
    bodies = table_bodies(table)
    return bodies[0] if bodies else table


def cell_text(row: Tag, index: int | None) -> str:
    """Trimmed text of the cell at `index`; empty when there is no such cell."""
    if index is None or index < 0:
        return ""
    cells = row_cells(row)
    if index >= len(cells):
        return ""
    return cells[index].get_text().strip()
