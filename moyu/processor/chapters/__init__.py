from moyu.processor.chapters.models import SegmenterConfig
from moyu.processor.chapters.segmenter import ChapterSegmenter

__all__ = ["ChapterSegmenter", "SegmenterConfig"]
