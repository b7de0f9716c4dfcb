from dataclasses import dataclass

from moyu.processor.paginator import split_lines


@dataclass(frozen=True)
class SearchHit:
    chapter_index: int
    line_number:   int     # 0-based dentro del capítulo


def search(query: str, chapters: list[str]) -> list[SearchHit]:
    """
    Busca `query` en cada línea de cada capítulo, sin distinguir mayúsculas.
    Recorre el documento entero y devuelve todas las coincidencias en orden
    de capítulo y de línea.

    Una consulta vacía (o solo espacios) no coincide con nada.
    """
    if not query or not query.strip():
        return []

    needle = query.casefold()
    return [
        SearchHit(chapter_index=ci, line_number=li)
        for ci, chapter in enumerate(chapters)
        for li, line in enumerate(split_lines(chapter))
        if needle in line.casefold()
    ]
