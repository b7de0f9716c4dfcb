# storage/__init__.py
from moyu.storage.models import Bookmark, ProgressRecord
from moyu.storage.progress_store import ProgressStore
from moyu.storage.repository import Repository

__all__ = [
    "ProgressStore", "Repository",
    "Bookmark", "ProgressRecord",
]
