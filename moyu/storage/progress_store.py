# storage/progress_store.py
import threading
from typing import Optional

from moyu.storage.models import Bookmark, ProgressRecord


class ProgressStore:
    """
    Progreso y marcadores en memoria, por identidad de documento (ruta absoluta).

    Se comparte entre todos los documentos abiertos durante la sesión.
    Las escrituras se serializan con un lock; las lecturas devuelven copias
    para que nadie mute el estado desde fuera.
    """

    def __init__(self):
        self._lock      = threading.RLock()
        self._progress:  dict[str, ProgressRecord] = {}
        self._bookmarks: dict[str, list[Bookmark]] = {}

    # ------------------------------------------------------------------
    # Progreso
    # ------------------------------------------------------------------

    def record_progress(
        self,
        novel_path:    str,
        chapter_index: int,
        page_index:    int,
        line_number:   int = 0,
    ) -> ProgressRecord:
        """Upsert. La última escritura gana."""
        record = ProgressRecord(chapter_index, page_index, line_number)
        with self._lock:
            self._progress[novel_path] = record
        return record

    def get_progress(self, novel_path: str) -> Optional[ProgressRecord]:
        with self._lock:
            return self._progress.get(novel_path)

    # ------------------------------------------------------------------
    # Marcadores
    # ------------------------------------------------------------------

    def add_bookmark(
        self,
        novel_path:    str,
        chapter_index: int,
        page_index:    int,
        title:         str,
    ) -> Bookmark:
        """
        Añade un marcador al final de la lista del documento.
        Validar que el título no esté vacío es cosa del llamador.
        """
        bookmark = Bookmark(novel_path, chapter_index, page_index, title)
        with self._lock:
            self._bookmarks.setdefault(novel_path, []).append(bookmark)
        return bookmark

    def remove_bookmark(self, bookmark: Bookmark) -> bool:
        """Elimina por igualdad de valor. False si no existía."""
        with self._lock:
            bookmarks = self._bookmarks.get(bookmark.novel_path)
            if not bookmarks or bookmark not in bookmarks:
                return False
            bookmarks.remove(bookmark)
            return True

    def list_bookmarks(self, novel_path: str) -> list[Bookmark]:
        """Marcadores del documento en orden de inserción."""
        with self._lock:
            return list(self._bookmarks.get(novel_path, []))

    # ------------------------------------------------------------------
    # Snapshot (para persistir fuera del proceso)
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[dict[str, ProgressRecord], list[Bookmark]]:
        with self._lock:
            progress  = dict(self._progress)
            bookmarks = [b for marks in self._bookmarks.values() for b in marks]
        return progress, bookmarks

    def load_records(
        self,
        progress:  dict[str, ProgressRecord],
        bookmarks: list[Bookmark],
    ) -> None:
        """Reemplaza el contenido del store. Los marcadores conservan su orden."""
        grouped: dict[str, list[Bookmark]] = {}
        for bookmark in bookmarks:
            grouped.setdefault(bookmark.novel_path, []).append(bookmark)
        with self._lock:
            self._progress  = dict(progress)
            self._bookmarks = grouped
