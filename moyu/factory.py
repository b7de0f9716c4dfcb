# moyu/factory.py
from dataclasses import dataclass
from typing import Optional

from moyu.config import ReaderConfig, load_config
from moyu.processor.chapters.models import SegmenterConfig
from moyu.processor.chapters.segmenter import ChapterSegmenter
from moyu.processor.parsers.factory import ParserFactory
from moyu.reader.service import ReaderService
from moyu.storage.progress_store import ProgressStore
from moyu.storage.repository import Repository


@dataclass
class ReaderSession:
    """Lector + store + persistencia, tal como los usa el CLI."""
    reader: ReaderService
    store:  ProgressStore
    repo:   Repository

    def save(self) -> None:
        self.repo.save_store(self.store)

    def close(self) -> None:
        self.reader.close()
        self.repo.close()


def build_session(
    config_path: Optional[str] = None,
    db_path:     Optional[str] = None,
) -> ReaderSession:
    """
    Ensambla el lector con todas sus dependencias y carga el progreso guardado.
    Punto de entrada único para el CLI y los tests de integración.
    """
    config = load_config(config_path)
    store  = ProgressStore()
    reader = build_reader(config, store)

    repo = Repository(db_path=db_path or config.db_path)
    repo.load_store(store)

    return ReaderSession(
        reader = reader,
        store  = store,
        repo   = repo,
    )


def build_reader(config: ReaderConfig, store: ProgressStore) -> ReaderService:
    segmenter_cfg = SegmenterConfig(keep_front_matter=config.keep_front_matter)
    segmenter_cfg.heading_patterns.extend(config.heading_patterns)

    return ReaderService(
        parser_factory = ParserFactory(),
        segmenter      = ChapterSegmenter(segmenter_cfg),
        store          = store,
        lines_per_page = config.lines_per_page,
    )
