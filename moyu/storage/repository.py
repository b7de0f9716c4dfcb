# storage/repository.py
import logging
import sqlite3

from moyu.storage.db import get_connection, init_schema
from moyu.storage.models import Bookmark, ProgressRecord
from moyu.storage.progress_store import ProgressStore

logger = logging.getLogger(__name__)


class Repository:
    """
    Persistencia del ProgressStore en SQLite, para sobrevivir entre sesiones.
    El lector nunca habla con SQLite: trabaja contra el store en memoria y
    quien lo hospeda decide cuándo cargar y cuándo guardar.
    Recibe un db_path para facilitar el testing con :memory:.
    """

    def __init__(self, db_path: str | None = None):
        self._conn = get_connection(db_path)
        init_schema(self._conn)

    # ------------------------------------------------------------------
    # Store completo
    # ------------------------------------------------------------------

    def load_store(self, store: ProgressStore) -> None:
        """Vuelca en `store` todo lo guardado (reemplaza su contenido)."""
        store.load_records(self.get_all_progress(), self.get_all_bookmarks())

    def save_store(self, store: ProgressStore) -> None:
        """
        Reescribe progreso y marcadores con el contenido de `store`.
        Atómico: o se guarda todo o no se guarda nada.
        """
        progress, bookmarks = store.snapshot()
        with self._conn:
            self._conn.execute("DELETE FROM progress")
            self._conn.execute("DELETE FROM bookmarks")
            self._conn.executemany(
                """
                INSERT INTO progress
                    (novel_path, chapter_index, page_index, line_number, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (path, r.chapter_index, r.page_index, r.line_number, r.timestamp)
                    for path, r in progress.items()
                ],
            )
            self._conn.executemany(
                """
                INSERT INTO bookmarks
                    (novel_path, chapter_index, page_index, title, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (b.novel_path, b.chapter_index, b.page_index, b.title, b.timestamp)
                    for b in bookmarks
                ],
            )
        logger.debug(
            "Store guardado: %d progresos, %d marcadores", len(progress), len(bookmarks)
        )

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def get_all_progress(self) -> dict[str, ProgressRecord]:
        rows = self._conn.execute("SELECT * FROM progress").fetchall()
        return {row["novel_path"]: self._row_to_progress(row) for row in rows}

    def get_all_bookmarks(self) -> list[Bookmark]:
        rows = self._conn.execute(
            "SELECT * FROM bookmarks ORDER BY id ASC"
        ).fetchall()
        return [self._row_to_bookmark(r) for r in rows]

    # ------------------------------------------------------------------
    # Mapeo de rows a dataclasses
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_progress(row: sqlite3.Row) -> ProgressRecord:
        return ProgressRecord(
            chapter_index=row["chapter_index"],
            page_index=row["page_index"],
            line_number=row["line_number"],
            timestamp=row["updated_at"],
        )

    @staticmethod
    def _row_to_bookmark(row: sqlite3.Row) -> Bookmark:
        return Bookmark(
            novel_path=row["novel_path"],
            chapter_index=row["chapter_index"],
            page_index=row["page_index"],
            title=row["title"],
            timestamp=row["timestamp"],
        )

    # ------------------------------------------------------------------
    # Cleanup (para tests)
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._conn.close()
