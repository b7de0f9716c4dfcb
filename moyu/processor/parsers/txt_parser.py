# moyu/processor/parsers/txt_parser.py
import locale
import logging

import chardet

from moyu.processor.models import DecodedText, NovelType
from .base import BaseParser

logger = logging.getLogger(__name__)

# Orden de intento: UTF-8 primero, luego las codificaciones chinas heredadas.
_ENCODINGS: tuple[str, ...] = ("utf-8", "gbk", "gb2312")


class TxtParser(BaseParser):
    """
    Parser para archivos .txt.

    Estrategia de decodificación:
      1. UTF-8, GBK y GB2312, en ese orden y en modo estricto.
      2. Si todas fallan → codificación por defecto de la plataforma.
      3. Si también falla → texto de diagnóstico "无法读取文件: ...".
    """

    types = frozenset({NovelType.TXT})

    def parse(self, file_path: str) -> DecodedText:
        try:
            with open(file_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            logger.warning("No se pudo leer %s: %s", file_path, e)
            return DecodedText(text=f"无法读取文件: {e}")

        for encoding in _ENCODINGS:
            try:
                return DecodedText(text=raw.decode(encoding), encoding=encoding.upper())
            except UnicodeDecodeError:
                continue

        fallback = locale.getpreferredencoding(False)
        logger.info("%s no es UTF-8/GBK, usando %s", file_path, fallback)
        try:
            return DecodedText(text=raw.decode(fallback), encoding=fallback.upper())
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning("Decodificación fallida para %s: %s", file_path, e)
            return DecodedText(text=f"无法读取文件: {e}")


def detect_encoding(file_path: str) -> str:
    """
    Estimación de la codificación de un archivo, sin leerlo como novela.
    Helper público para quien hospeda el lector (el CLI la muestra en
    `moyu chapters`); TxtParser no lo usa, sigue su propio orden de intentos.
    UTF-8 válido gana siempre; si no, se pregunta a chardet.
    Cualquier problema → "UTF-8".
    """
    try:
        with open(file_path, "rb") as f:
            raw = f.read()
    except OSError:
        return "UTF-8"

    try:
        raw.decode("utf-8")
        return "UTF-8"
    except UnicodeDecodeError:
        pass

    guess = chardet.detect(raw).get("encoding")
    return guess.upper() if guess else "UTF-8"
