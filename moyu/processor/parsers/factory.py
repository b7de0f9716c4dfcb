import os
from typing import Optional

from moyu.processor.models import DecodedText, NovelType
from .base import BaseParser
from .epub_parser import EpubParser
from .mobi_parser import MobiParser
from .pdf_parser import PdfParser
from .txt_parser import TxtParser


class UnsupportedFormatError(Exception):
    """Se lanza cuando ningún parser registrado puede manejar el tipo declarado."""
    pass


class ParserFactory:
    """
    Registro central de parsers.

    Uso básico:
        decoded = ParserFactory.decode_file("/ruta/al/libro.epub")

    Uso con parser registrado externamente:
        factory = ParserFactory()
        factory.register(MiParserCustom())
        decoded = factory.decode("/ruta/al/libro.mobi", NovelType.MOBI)

    Los parsers se evalúan en orden de registro.
    El primero que responda True a can_handle() gana.
    """

    def __init__(self):
        self._parsers: list[BaseParser] = [
            TxtParser(),
            EpubParser(),
            PdfParser(),
            MobiParser(),
        ]

    def register(self, parser: BaseParser) -> None:
        """Registra un parser adicional al inicio de la lista (mayor prioridad)."""
        self._parsers.insert(0, parser)

    def decode(self, file_path: str, declared_type: Optional[NovelType] = None) -> DecodedText:
        """
        Decodifica el archivo con el parser adecuado a su tipo.
        Si no se declara tipo, se deduce de la extensión.

        Raises:
            FileNotFoundError: si el archivo no existe.
            UnsupportedFormatError: si ningún parser puede manejarlo.
        """
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"Archivo no encontrado: {file_path}")

        novel_type = declared_type or NovelType.from_path(file_path)

        for parser in self._parsers:
            if parser.can_handle(novel_type):
                return parser.parse(file_path)

        ext = os.path.splitext(file_path)[1].lower()
        raise UnsupportedFormatError(
            f"Formato '{ext}' no soportado. "
            f"Formatos disponibles: {self.supported_extensions()}"
        )

    def supported_extensions(self) -> str:
        types = {t for parser in self._parsers for t in parser.types}
        return ", ".join(sorted(f".{t.value}" for t in types))

    # ------------------------------------------------------------------ #
    #  Método de clase para uso rápido sin instanciar                     #
    # ------------------------------------------------------------------ #

    @classmethod
    def decode_file(cls, file_path: str) -> DecodedText:
        """Shortcut: ParserFactory.decode_file('libro.txt')"""
        return cls().decode(file_path)
