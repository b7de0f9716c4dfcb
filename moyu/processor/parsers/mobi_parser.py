import os

from moyu.processor.models import DecodedText, NovelType
from .base import BaseParser


class MobiParser(BaseParser):
    """
    MOBI/AZW/AZW3 todavía sin parser real.
    Devuelve un aviso legible; el lector lo trata como texto normal.
    """

    types = frozenset({NovelType.MOBI, NovelType.AZW, NovelType.AZW3})

    def parse(self, file_path: str) -> DecodedText:
        path = os.path.abspath(file_path)
        return DecodedText(text=(
            "MOBI/AZW/AZW3格式支持待完善\n"
            f"文件路径: {path}\n"
            f"文件大小: {os.path.getsize(path)} 字节\n\n"
            "提示：由于MOBI/AZW/AZW3格式的复杂性，需要专门的解析库支持，"
            "当前版本暂时提供基础支持。"
        ))
