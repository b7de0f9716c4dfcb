from abc import ABC, abstractmethod

from moyu.processor.models import DecodedText, NovelType


class BaseParser(ABC):
    """
    Contrato de los decodificadores.
    parse() nunca lanza por un archivo ilegible: devuelve un texto de
    diagnóstico que el lector puede mostrar como cualquier otro contenido.
    """

    #: tipos declarados que este parser sabe leer
    types: frozenset[NovelType] = frozenset()

    def can_handle(self, novel_type: NovelType) -> bool:
        """Devuelve True si el parser puede manejar el tipo declarado."""
        return novel_type in self.types

    @abstractmethod
    def parse(self, file_path: str) -> DecodedText:
        """Decodifica el archivo y devuelve su texto plano."""
        raise NotImplementedError
