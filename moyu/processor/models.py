# processor/models.py
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class NovelType(Enum):
    TXT     = "txt"
    EPUB    = "epub"
    MOBI    = "mobi"
    AZW     = "azw"
    AZW3    = "azw3"
    PDF     = "pdf"
    UNKNOWN = "unknown"

    @classmethod
    def from_path(cls, file_path: str) -> "NovelType":
        """Deduce el tipo a partir de la extensión (sin distinguir mayúsculas)."""
        ext = os.path.splitext(file_path)[1].lower().lstrip(".")
        for member in cls:
            if member is not cls.UNKNOWN and member.value == ext:
                return member
        return cls.UNKNOWN


@dataclass
class NovelFile:
    """
    Documento abierto en el lector.
    La identidad es la ruta absoluta: clave de progreso y marcadores.
    """
    path:  str
    title: str       = ""
    type:  NovelType = NovelType.UNKNOWN

    @classmethod
    def from_path(cls, file_path: str, declared_type: Optional[NovelType] = None) -> "NovelFile":
        path = str(Path(file_path).resolve())
        return cls(
            path  = path,
            title = Path(path).stem,
            type  = declared_type or NovelType.from_path(path),
        )

    @property
    def identity(self) -> str:
        return self.path


@dataclass
class DecodedText:
    """Lo que sale de cualquier Parser: texto plano + lo poco que sepamos del origen."""
    text:     str
    encoding: Optional[str] = None
    title:    Optional[str] = None


@dataclass(frozen=True)
class Chapter:
    index: int
    text:  str
    title: str = field(default="", compare=False)
