import html as html_lib
import logging
import os
import re

from moyu.processor.models import DecodedText, NovelType
from .base import BaseParser

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'<[^>]*>')


class EpubParser(BaseParser):
    """
    Parser para archivos .epub.

    Produce un único texto continuo:
      《título》

      作者: autor1, autor2      (solo si hay autores en la metadata)

      <texto de cada documento del libro, sin etiquetas HTML>

    El troceo en capítulos no es cosa del parser: lo hace el segmentador
    sobre el texto completo.

    Dependencia: ebooklib  →  pip install ebooklib
    """

    types = frozenset({NovelType.EPUB})

    def parse(self, file_path: str) -> DecodedText:
        try:
            import ebooklib
            from ebooklib import epub

            book = epub.read_epub(file_path, options={'ignore_ncx': True})

            title = self._extract_title(book, file_path)
            parts = [f"《{title}》\n\n"]

            authors = self._extract_authors(book)
            if authors:
                parts.append(f"作者: {', '.join(authors)}\n\n")

            for item in book.get_items_of_type(ebooklib.ITEM_DOCUMENT):
                parts.append(self._html_to_text(item.get_content()))
                parts.append("\n\n")

            return DecodedText(text="".join(parts), encoding="UTF-8", title=title)

        except Exception as e:
            logger.warning("EPUB ilegible %s: %s", file_path, e)
            return DecodedText(
                text=f"无法解析EPUB文件: {e}\n文件路径: {os.path.abspath(file_path)}"
            )

    # ------------------------------------------------------------------ #
    #  Helpers privados                                                    #
    # ------------------------------------------------------------------ #

    def _extract_title(self, book, file_path: str) -> str:
        titles = book.get_metadata('DC', 'title')
        if titles and str(titles[0][0]).strip():
            return str(titles[0][0]).strip()
        return os.path.splitext(os.path.basename(file_path))[0]

    def _extract_authors(self, book) -> list[str]:
        creators = book.get_metadata('DC', 'creator') or []
        return [str(c[0]).strip() for c in creators if str(c[0]).strip()]

    def _html_to_text(self, html_bytes: bytes) -> str:
        """Quita etiquetas y decodifica entidades. Sin normalizar espacios."""
        try:
            content = html_bytes.decode('utf-8')
        except UnicodeDecodeError:
            content = html_bytes.decode('latin-1')

        content = _TAG_RE.sub('', content)
        content = html_lib.unescape(content).replace('\xa0', ' ')
        return content.strip()
