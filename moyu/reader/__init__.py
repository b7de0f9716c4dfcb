from moyu.reader.service import ReaderService

__all__ = ["ReaderService"]
