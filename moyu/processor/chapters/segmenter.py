import logging
import re

from moyu.processor.models import Chapter
from moyu.processor.paginator import split_lines
from .models import SegmenterConfig

logger = logging.getLogger(__name__)


class ChapterSegmenter:
    """
    Responsabilidad única: partir el texto completo de una novela en
    capítulos a partir de sus encabezados.

    Los encabezados se buscan sobre el texto entero, no línea a línea,
    así que un "第三章" en mitad de una línea también abre capítulo.
    No sabe nada de páginas ni de archivos.
    """

    def __init__(self, config: SegmenterConfig | None = None):
        self._config = config or SegmenterConfig()
        self._matchers = self._compile_patterns()
        self._scanner = re.compile(
            "|".join(f"(?:{p})" for p in self._config.heading_patterns),
            re.IGNORECASE | re.MULTILINE,
        )

    def segment(self, raw_text: str) -> list[str]:
        """
        Devuelve los capítulos en orden. Cada capítulo va desde un
        encabezado hasta el siguiente, sin espacios en los extremos;
        los capítulos vacíos se descartan.
        Sin encabezados (o si todos los tramos quedan vacíos) → el texto
        completo, tal cual, es el único capítulo.
        """
        boundaries = [
            m.start() for m in self._scanner.finditer(raw_text)
            if m.end() > m.start()
        ]
        if not boundaries:
            return [raw_text]

        chapters: list[str] = []

        if self._config.keep_front_matter:
            front = raw_text[:boundaries[0]].strip()
            if front:
                chapters.append(front)

        ends = boundaries[1:] + [len(raw_text)]
        for start, end in zip(boundaries, ends):
            chapter = raw_text[start:end].strip()
            if chapter:
                chapters.append(chapter)

        if not chapters:
            # los encabezados solo casaban con espacios en blanco
            return [raw_text]

        logger.debug("%d encabezados → %d capítulos", len(boundaries), len(chapters))
        return chapters

    def title_of(self, index: int, chapter_text: str) -> str:
        """
        Primera línea del capítulo que es, entera, un encabezado.
        Si ninguna lo es → "第{index+1}章".
        """
        for line in split_lines(chapter_text):
            stripped = line.strip()
            if any(m.fullmatch(stripped) for m in self._matchers):
                return stripped
        return f"第{index + 1}章"

    def titles(self, chapters: list[str]) -> list[str]:
        return [self.title_of(i, text) for i, text in enumerate(chapters)]

    def split(self, raw_text: str) -> list[Chapter]:
        """segment() + title_of() en un solo paso."""
        return [
            Chapter(index=i, text=text, title=self.title_of(i, text))
            for i, text in enumerate(self.segment(raw_text))
        ]

    def _compile_patterns(self) -> list[re.Pattern]:
        """Compila los patrones por separado para la detección de títulos."""
        return [
            re.compile(p, re.IGNORECASE | re.MULTILINE)
            for p in self._config.heading_patterns
        ]
