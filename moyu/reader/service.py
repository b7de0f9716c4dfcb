# moyu/reader/service.py
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from moyu.processor.chapters.segmenter import ChapterSegmenter
from moyu.processor.models import NovelFile, NovelType
from moyu.processor.paginator import DEFAULT_LINES_PER_PAGE, paginate
from moyu.processor.parsers.factory import ParserFactory
from moyu.processor.search import SearchHit, search
from moyu.storage.models import Bookmark, ProgressRecord
from moyu.storage.progress_store import ProgressStore

logger = logging.getLogger(__name__)


class ReaderService:
    """
    Máquina de navegación del lector: documento actual, capítulo y página.

    Responsabilidades:
    - Abrir documentos (decodificar + segmentar) y restaurar su progreso
    - Moverse por páginas y capítulos; solo se pagina el capítulo activo
    - Escribir el progreso en el store tras cada movimiento con éxito
    - Marcadores y búsqueda sobre el documento actual

    Los límites del libro no son errores: un movimiento imposible devuelve
    None (o False) y deja el puntero donde estaba.
    Todas las mutaciones pasan por un único lock.
    """

    def __init__(
        self,
        parser_factory: ParserFactory,
        segmenter:      ChapterSegmenter,
        store:          ProgressStore,
        lines_per_page: int = DEFAULT_LINES_PER_PAGE,
    ):
        if lines_per_page < 1:
            raise ValueError(f"lines_per_page debe ser >= 1, recibido {lines_per_page}")

        self._parser_factory = parser_factory
        self._segmenter      = segmenter
        self._store          = store
        self._lines_per_page = lines_per_page

        self._lock = threading.RLock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._open_ticket = 0

        self._document:       Optional[NovelFile] = None
        self._open_documents: list[NovelFile]     = []
        self._chapters:       list[str]           = []
        self._titles:         Optional[list[str]] = None
        self._pages:          list[str]           = []
        self._chapter_index = 0
        self._page_index    = 0

    # ------------------------------------------------------------------
    # Apertura
    # ------------------------------------------------------------------

    def open_document(self, file_path: str, declared_type: Optional[NovelType] = None) -> bool:
        """
        Abre un documento y lo convierte en el actual.
        Si existe progreso guardado para esa ruta, se restaura; si no, (0, 0).
        Ante cualquier fallo se registra el error, se devuelve False y el
        documento anterior (si lo había) sigue abierto.
        Si antes de terminar se pide otra apertura, esta se descarta (False).
        """
        with self._lock:
            self._open_ticket += 1
            ticket = self._open_ticket
        return self._load_and_commit(file_path, declared_type, ticket)

    def open_document_async(
        self,
        file_path:     str,
        declared_type: Optional[NovelType] = None,
    ) -> "Future[bool]":
        """
        Igual que open_document() pero decodifica en segundo plano.
        Si mientras tanto se pide abrir otro documento, este resultado se
        descarta (gana la última apertura) y el futuro devuelve False.
        """
        with self._lock:
            self._open_ticket += 1
            ticket = self._open_ticket
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="moyu-open"
                )
            executor = self._executor
        return executor.submit(self._load_and_commit, file_path, declared_type, ticket)

    def close(self) -> None:
        """Libera el hilo de apertura en segundo plano, si se llegó a crear."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Navegación
    # ------------------------------------------------------------------

    def next_page(self) -> Optional[str]:
        """Página siguiente; al final del capítulo salta a la primera del siguiente."""
        with self._lock:
            if self._document is None:
                return None
            if self._page_index < len(self._pages) - 1:
                self._page_index += 1
                self._save_progress()
                return self._current_page()
            if self._chapter_index < len(self._chapters) - 1:
                return self._go_to_chapter(self._chapter_index + 1)
            return None

    def previous_page(self) -> Optional[str]:
        """
        Página anterior. En la primera página de un capítulo salta a la
        ÚLTIMA página del capítulo anterior (no a la primera).
        """
        with self._lock:
            if self._document is None:
                return None
            if self._page_index > 0:
                self._page_index -= 1
                self._save_progress()
                return self._current_page()
            if self._chapter_index > 0:
                self._set_chapter(self._chapter_index - 1)
                self._page_index = max(len(self._pages) - 1, 0)
                self._save_progress()
                return self._current_page()
            return None

    def next_chapter(self) -> Optional[str]:
        with self._lock:
            return self._go_to_chapter(self._chapter_index + 1)

    def previous_chapter(self) -> Optional[str]:
        with self._lock:
            return self._go_to_chapter(self._chapter_index - 1)

    def go_to_chapter(self, index: int) -> Optional[str]:
        """Salta a la primera página del capítulo `index` (0-based)."""
        with self._lock:
            return self._go_to_chapter(index)

    def go_to_page(self, index: int) -> Optional[str]:
        """Salta a la página `index` del capítulo actual."""
        with self._lock:
            if self._document is None or not 0 <= index < len(self._pages):
                return None
            self._page_index = index
            self._save_progress()
            return self._current_page()

    def go_to_position(self, chapter_index: int, line_number: int) -> bool:
        """
        Salta a la página que contiene la línea `line_number` del capítulo.
        Una línea fuera de rango deja el lector en la primera página.
        Pensado para los resultados de search().
        """
        with self._lock:
            if self._document is None or not 0 <= chapter_index < len(self._chapters):
                return False
            self._set_chapter(chapter_index)
            page = line_number // self._lines_per_page if line_number >= 0 else -1
            self._page_index = page if 0 <= page < len(self._pages) else 0
            self._save_progress()
            return True

    def go_to_bookmark(self, bookmark: Bookmark) -> bool:
        """
        Solo funciona con marcadores del documento actual. Si la página ya no
        existe tras repaginar (el archivo cambió), se queda en la primera.
        """
        with self._lock:
            if self._document is None or bookmark.novel_path != self._document.identity:
                return False
            if not 0 <= bookmark.chapter_index < len(self._chapters):
                return False
            self._set_chapter(bookmark.chapter_index)
            if 0 <= bookmark.page_index < len(self._pages):
                self._page_index = bookmark.page_index
            else:
                self._page_index = 0
            self._save_progress()
            return True

    def set_lines_per_page(self, lines_per_page: int) -> None:
        """
        Cambia el tamaño de página y repagina el capítulo actual,
        manteniendo visible la primera línea que se estaba leyendo.
        """
        if lines_per_page < 1:
            raise ValueError(f"lines_per_page debe ser >= 1, recibido {lines_per_page}")
        with self._lock:
            first_line = self._page_index * self._lines_per_page
            self._lines_per_page = lines_per_page
            if self._document is None:
                return
            self._pages = paginate(self._chapters[self._chapter_index], lines_per_page)
            self._page_index = min(first_line // lines_per_page, max(len(self._pages) - 1, 0))
            self._save_progress()

    # ------------------------------------------------------------------
    # Lectura del estado
    # ------------------------------------------------------------------

    def current_page(self) -> Optional[str]:
        with self._lock:
            return self._current_page()

    def current_chapter(self) -> Optional[str]:
        with self._lock:
            if self._document is None or not self._chapters:
                return None
            return self._chapters[self._chapter_index]

    def chapter_titles(self) -> list[str]:
        with self._lock:
            if self._titles is None:
                self._titles = self._segmenter.titles(self._chapters)
            return list(self._titles)

    def current_progress(self) -> Optional[ProgressRecord]:
        with self._lock:
            if self._document is None:
                return None
            return self._store.get_progress(self._document.identity)

    @property
    def current_document(self) -> Optional[NovelFile]:
        return self._document

    @property
    def open_documents(self) -> list[NovelFile]:
        with self._lock:
            return list(self._open_documents)

    @property
    def total_chapters(self) -> int:
        return len(self._chapters)

    @property
    def chapter_index(self) -> int:
        return self._chapter_index

    @property
    def page_index(self) -> int:
        return self._page_index

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def lines_per_page(self) -> int:
        return self._lines_per_page

    # ------------------------------------------------------------------
    # Marcadores y búsqueda
    # ------------------------------------------------------------------

    def add_bookmark(self, title: str) -> Optional[Bookmark]:
        """
        Marca la posición actual. Títulos en blanco o ningún documento
        abierto → None.
        """
        with self._lock:
            if self._document is None or not title or not title.strip():
                return None
            return self._store.add_bookmark(
                self._document.identity,
                self._chapter_index,
                self._page_index,
                title.strip(),
            )

    def remove_bookmark(self, bookmark: Bookmark) -> bool:
        return self._store.remove_bookmark(bookmark)

    def bookmarks(self) -> list[Bookmark]:
        """Marcadores del documento actual, en orden de creación."""
        with self._lock:
            if self._document is None:
                return []
            return self._store.list_bookmarks(self._document.identity)

    def search(self, query: str) -> list[SearchHit]:
        with self._lock:
            chapters = list(self._chapters)
        return search(query, chapters)

    # ------------------------------------------------------------------
    # Helpers privados (se llaman con el lock tomado)
    # ------------------------------------------------------------------

    def _load_and_commit(
        self,
        file_path:     str,
        declared_type: Optional[NovelType],
        ticket:        int,
    ) -> bool:
        try:
            novel    = NovelFile.from_path(file_path, declared_type)
            decoded  = self._parser_factory.decode(novel.path, novel.type)
            chapters = self._segmenter.segment(decoded.text)
        except Exception as e:
            logger.error("No se pudo abrir %s: %s", file_path, e)
            return False

        if not chapters:
            logger.error("No se pudo abrir %s: el segmentador no devolvió capítulos", file_path)
            return False

        if decoded.title:
            novel.title = decoded.title

        with self._lock:
            if ticket != self._open_ticket:
                logger.info("Apertura de %s descartada: hay otra más reciente", novel.path)
                return False
            self._commit(novel, chapters)
            logger.info(
                "Abierto '%s' (%s, %d capítulos) en capítulo %d, página %d",
                novel.title, novel.type.value, len(chapters),
                self._chapter_index, self._page_index,
            )
        return True

    def _commit(self, novel: NovelFile, chapters: list[str]) -> None:
        """Calcula la posición y las páginas antes de tocar el estado."""
        saved   = self._store.get_progress(novel.identity)
        chapter = 0
        if saved is not None:
            # el archivo pudo cambiar desde la última lectura
            chapter = min(max(saved.chapter_index, 0), len(chapters) - 1)
        pages = paginate(chapters[chapter], self._lines_per_page)
        page  = 0
        if saved is not None and 0 <= saved.page_index < len(pages):
            page = saved.page_index

        self._document      = novel
        self._chapters      = chapters
        self._titles        = None
        self._chapter_index = chapter
        self._pages         = pages
        self._page_index    = page

        self._open_documents = [
            d for d in self._open_documents if d.identity != novel.identity
        ]
        self._open_documents.append(novel)

    def _set_chapter(self, index: int) -> None:
        """Activa el capítulo, lo pagina y vuelve a su primera página."""
        self._chapter_index = index
        self._pages         = paginate(self._chapters[index], self._lines_per_page)
        self._page_index    = 0

    def _go_to_chapter(self, index: int) -> Optional[str]:
        if self._document is None or not 0 <= index < len(self._chapters):
            return None
        self._set_chapter(index)
        self._save_progress()
        return self._current_page()

    def _current_page(self) -> Optional[str]:
        if self._document is None or not 0 <= self._page_index < len(self._pages):
            return None
        return self._pages[self._page_index]

    def _save_progress(self) -> None:
        self._store.record_progress(
            self._document.identity,
            self._chapter_index,
            self._page_index,
            line_number=self._page_index * self._lines_per_page,
        )
