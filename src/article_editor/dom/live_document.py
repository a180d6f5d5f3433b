# src/article_editor/dom/live_document.py
import logging
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


class LiveDocumentHandle:
    """
    A mutable, rendered document standing in for the visual-edit iframe.

    Exposes the three capabilities the visual surface needs: query by
    predicate, mutate elements in place, and serialize the body's inner
    markup. Tag handles stay valid until the document is rebuilt.
    """

    def __init__(self, srcdoc: str):
        self._soup = BeautifulSoup(srcdoc or "", "html.parser")
        self.body: Tag = self._soup.body if self._soup.body else self._soup

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def query(self, predicate: Callable[[Tag], bool]) -> List[Tag]:
        return [tag for tag in self.body.find_all(True) if predicate(tag)]

    def query_one(self, predicate: Callable[[Tag], bool]) -> Optional[Tag]:
        for tag in self.body.find_all(True):
            if predicate(tag):
                return tag
        return None

    def images(self) -> List[Tag]:
        return self.query(lambda tag: tag.name == "img")

    def contains(self, tag: Optional[Tag]) -> bool:
        if tag is None:
            return False
        return tag is self.body or any(parent is self.body for parent in tag.parents)

    def create_element(self, name: str, attrs: Optional[Dict[str, str]] = None, text: Optional[str] = None) -> Tag:
        element = self._soup.new_tag(name, attrs=attrs or {})
        if text:
            element.string = text
        return element

    def append(self, element: Tag) -> Tag:
        self.body.append(element)
        return element

    def insert_after(self, anchor: Tag, element: Tag) -> Tag:
        if not self.contains(anchor) or anchor is self.body:
            return self.append(element)
        anchor.insert_after(element)
        return element

    def replace_body(self, markup: str) -> None:
        """Replaces the body content, as the browser's DOM would look after user edits."""
        fragment = BeautifulSoup(markup or "", "html.parser")
        self.body.clear()
        for child in list(fragment.contents):
            self.body.append(child.extract())

    def serialize(self) -> str:
        """The inner markup of the editable root."""
        return self.body.decode_contents()
