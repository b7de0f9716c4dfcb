# storage/models.py
import time
from dataclasses import dataclass, field


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Bookmark:
    """
    Marcador de lectura. Igualdad por valor: dos marcadores con los mismos
    campos (incluido el timestamp) son el mismo marcador.
    """
    novel_path:    str
    chapter_index: int
    page_index:    int
    title:         str
    timestamp:     int = field(default_factory=_now_millis)


@dataclass(frozen=True)
class ProgressRecord:
    chapter_index: int
    page_index:    int
    line_number:   int = 0      # primera línea de la página actual
    timestamp:     int = field(default_factory=_now_millis, compare=False)
