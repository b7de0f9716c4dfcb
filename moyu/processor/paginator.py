# moyu/processor/paginator.py
import re

DEFAULT_LINES_PER_PAGE = 50

_LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')


def split_lines(text: str) -> list[str]:
    """Parte en líneas por \\r\\n, \\r o \\n. Texto vacío → sin líneas."""
    if not text:
        return []
    return _LINE_BREAK_RE.split(text)


def paginate(chapter_text: str, lines_per_page: int = DEFAULT_LINES_PER_PAGE) -> list[str]:
    """
    Divide un capítulo en páginas de `lines_per_page` líneas consecutivas.
    La última página puede ser más corta. El contenido de cada línea se
    conserva tal cual; las líneas de una página se unen con "\\n".

    Función pura: cada llamada devuelve una lista nueva.
    """
    if lines_per_page < 1:
        raise ValueError(f"lines_per_page debe ser >= 1, recibido {lines_per_page}")

    lines = split_lines(chapter_text)
    return [
        "\n".join(lines[i:i + lines_per_page])
        for i in range(0, len(lines), lines_per_page)
    ]
