# moyu/processor/parsers/pdf_parser.py
import logging
import os
import re

from moyu.processor.models import DecodedText, NovelType
from .base import BaseParser

logger = logging.getLogger(__name__)

_BLANK_RUN_RE = re.compile(r'[\n\r]{3,}')
_SPACE_RUN_RE = re.compile(r'[ \t]+')


class PdfParser(BaseParser):
    """
    Parser para archivos .pdf.

    Extrae el texto de todas las páginas con PyMuPDF (fitz) y lo limpia:
    tres o más saltos de línea seguidos quedan en dos, y las rachas de
    espacios/tabuladores en uno solo.

    Requiere: pip install pymupdf
    """

    types = frozenset({NovelType.PDF})

    def parse(self, file_path: str) -> DecodedText:
        stem = os.path.splitext(os.path.basename(file_path))[0]
        try:
            import fitz  # pymupdf

            with fitz.open(file_path) as doc:
                content = "".join(page.get_text("text") for page in doc)

        except Exception as e:
            logger.warning("PDF ilegible %s: %s", file_path, e)
            return DecodedText(
                text=f"无法解析PDF文件: {e}\n文件路径: {os.path.abspath(file_path)}"
            )

        return DecodedText(text=f"《{stem}》\n\n{clean_pdf_text(content)}", title=stem)


def clean_pdf_text(content: str) -> str:
    content = _BLANK_RUN_RE.sub("\n\n", content)
    content = _SPACE_RUN_RE.sub(" ", content)
    return content.strip()
