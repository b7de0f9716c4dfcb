"""
Tests de los parsers (decodificadores).

Ejecutar:
    pytest tests/processor/parsers/ -v

EPUB y PDF se prueban con mocks de ebooklib y fitz: no hace falta
un libro real en el repo.
"""

from unittest.mock import MagicMock, patch

import pytest

from moyu.processor.models import DecodedText, NovelType
from moyu.processor.parsers.base import BaseParser
from moyu.processor.parsers.epub_parser import EpubParser
from moyu.processor.parsers.factory import ParserFactory, UnsupportedFormatError
from moyu.processor.parsers.mobi_parser import MobiParser
from moyu.processor.parsers.pdf_parser import PdfParser, clean_pdf_text
from moyu.processor.parsers.txt_parser import TxtParser, detect_encoding

_NOT_UTF8_NOR_GBK = b"\xff\xfe\xff"


# ═══════════════════════════════════════════════════════════════════════════ #
#  NovelType                                                                  #
# ═══════════════════════════════════════════════════════════════════════════ #

@pytest.mark.parametrize("name,expected", [
    ("libro.txt", NovelType.TXT),
    ("LIBRO.EPUB", NovelType.EPUB),
    ("a.mobi", NovelType.MOBI),
    ("a.azw", NovelType.AZW),
    ("a.azw3", NovelType.AZW3),
    ("a.pdf", NovelType.PDF),
    ("a.docx", NovelType.UNKNOWN),
    ("sin_extension", NovelType.UNKNOWN),
])
def test_novel_type_from_path(name, expected):
    assert NovelType.from_path(name) is expected


# ═══════════════════════════════════════════════════════════════════════════ #
#  TxtParser                                                                  #
# ═══════════════════════════════════════════════════════════════════════════ #

class TestTxtParser:

    @pytest.fixture
    def parser(self):
        return TxtParser()

    def test_handles_txt_only(self, parser):
        assert parser.can_handle(NovelType.TXT) is True
        assert parser.can_handle(NovelType.EPUB) is False

    def test_lee_utf8(self, parser, tmp_path):
        f = tmp_path / "libro.txt"
        f.write_text("第一章 你好\nHola", encoding="utf-8")

        decoded = parser.parse(str(f))

        assert decoded.text == "第一章 你好\nHola"
        assert decoded.encoding == "UTF-8"

    def test_cae_a_gbk(self, parser, tmp_path):
        f = tmp_path / "libro.txt"
        f.write_bytes("第一章 你好".encode("gbk"))

        decoded = parser.parse(str(f))

        assert decoded.text == "第一章 你好"
        assert decoded.encoding == "GBK"

    def test_cae_a_la_codificacion_de_la_plataforma(self, parser, tmp_path, monkeypatch):
        f = tmp_path / "libro.txt"
        f.write_bytes(_NOT_UTF8_NOR_GBK)
        monkeypatch.setattr(
            "moyu.processor.parsers.txt_parser.locale.getpreferredencoding",
            lambda do_setlocale=True: "latin-1",
        )

        decoded = parser.parse(str(f))

        assert decoded.text == _NOT_UTF8_NOR_GBK.decode("latin-1")
        assert decoded.encoding == "LATIN-1"

    def test_fallo_total_devuelve_diagnostico(self, parser, tmp_path, monkeypatch):
        f = tmp_path / "libro.txt"
        f.write_bytes(_NOT_UTF8_NOR_GBK)
        monkeypatch.setattr(
            "moyu.processor.parsers.txt_parser.locale.getpreferredencoding",
            lambda do_setlocale=True: "ascii",
        )

        decoded = parser.parse(str(f))

        assert decoded.text.startswith("无法读取文件: ")
        assert decoded.encoding is None

    def test_error_de_lectura_devuelve_diagnostico(self, parser, tmp_path):
        decoded = parser.parse(str(tmp_path))   # un directorio no se puede leer

        assert decoded.text.startswith("无法读取文件: ")


class TestDetectEncoding:

    def test_utf8(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_text("你好", encoding="utf-8")
        assert detect_encoding(str(f)) == "UTF-8"

    def test_pregunta_a_chardet_si_no_es_utf8(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_bytes("你好世界".encode("gbk"))

        with patch(
            "moyu.processor.parsers.txt_parser.chardet.detect",
            return_value={"encoding": "GB2312"},
        ):
            assert detect_encoding(str(f)) == "GB2312"

    def test_chardet_sin_respuesta(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_bytes(_NOT_UTF8_NOR_GBK)

        with patch(
            "moyu.processor.parsers.txt_parser.chardet.detect",
            return_value={"encoding": None},
        ):
            assert detect_encoding(str(f)) == "UTF-8"

    def test_archivo_inexistente(self, tmp_path):
        assert detect_encoding(str(tmp_path / "no_existe.txt")) == "UTF-8"


# ═══════════════════════════════════════════════════════════════════════════ #
#  EpubParser                                                                 #
# ═══════════════════════════════════════════════════════════════════════════ #

class TestEpubParser:
    """Tests del parser EPUB usando mocks de ebooklib."""

    @pytest.fixture
    def parser(self):
        return EpubParser()

    @pytest.fixture
    def dummy_file(self, tmp_path):
        f = tmp_path / "libro.epub"
        f.write_bytes(b"")
        return f

    def _make_mock_epub(self, title="书名", authors=("作者甲",), documents=None):
        """Helper: construye un mock de ebooklib.epub.EpubBook."""
        metadata = {
            "title":   [(title, {})] if title else [],
            "creator": [(a, {}) for a in authors],
        }
        mock_book = MagicMock()
        mock_book.get_metadata.side_effect = lambda ns, key: metadata.get(key, [])

        items = []
        for html in documents or ["<h1>第一章</h1>\n<p>内容</p>"]:
            item = MagicMock()
            item.get_content.return_value = html.encode("utf-8")
            items.append(item)
        mock_book.get_items_of_type.return_value = items
        return mock_book

    def test_handles_epub_only(self, parser):
        assert parser.can_handle(NovelType.EPUB) is True
        assert parser.can_handle(NovelType.PDF) is False

    def test_cabecera_con_titulo_y_autores(self, parser, dummy_file):
        book = self._make_mock_epub(authors=("甲", "乙"))

        with patch("ebooklib.epub.read_epub", return_value=book):
            decoded = parser.parse(str(dummy_file))

        assert decoded.text.startswith("《书名》\n\n作者: 甲, 乙\n\n")
        assert decoded.title == "书名"

    def test_sin_autores_no_hay_linea_de_autor(self, parser, dummy_file):
        book = self._make_mock_epub(authors=())

        with patch("ebooklib.epub.read_epub", return_value=book):
            decoded = parser.parse(str(dummy_file))

        assert "作者" not in decoded.text

    def test_titulo_cae_al_nombre_del_archivo(self, parser, dummy_file):
        book = self._make_mock_epub(title=None)

        with patch("ebooklib.epub.read_epub", return_value=book):
            decoded = parser.parse(str(dummy_file))

        assert decoded.text.startswith("《libro》")

    def test_html_limpio_y_secciones_separadas(self, parser, dummy_file):
        book = self._make_mock_epub(documents=[
            "<h1>第一章</h1>\n<p>Uno &amp; &quot;dos&quot;</p>",
            "<div>第二章</div>",
        ])

        with patch("ebooklib.epub.read_epub", return_value=book):
            decoded = parser.parse(str(dummy_file))

        body = decoded.text.split("作者: 作者甲\n\n", 1)[1]
        assert body == '第一章\nUno & "dos"\n\n第二章\n\n'

    def test_epub_roto_devuelve_diagnostico(self, parser, dummy_file):
        with patch("ebooklib.epub.read_epub", side_effect=Exception("zip roto")):
            decoded = parser.parse(str(dummy_file))

        assert decoded.text.startswith("无法解析EPUB文件: zip roto")
        assert str(dummy_file) in decoded.text


# ═══════════════════════════════════════════════════════════════════════════ #
#  PdfParser                                                                  #
# ═══════════════════════════════════════════════════════════════════════════ #

class TestPdfParser:

    @pytest.fixture
    def parser(self):
        return PdfParser()

    def _make_mock_doc(self, pages: list[str]):
        mock_pages = []
        for text in pages:
            page = MagicMock()
            page.get_text.return_value = text
            mock_pages.append(page)
        doc = MagicMock()
        doc.__enter__.return_value = mock_pages
        return doc

    def test_clean_pdf_text(self):
        assert clean_pdf_text("  a\n\n\n\nb   c\t\td\n") == "a\n\nb c d"

    def test_dos_saltos_se_conservan(self):
        assert clean_pdf_text("a\n\nb") == "a\n\nb"

    def test_parse_concatena_paginas_y_limpia(self, parser, tmp_path):
        f = tmp_path / "novela.pdf"
        f.write_bytes(b"%PDF")
        doc = self._make_mock_doc(["第一章\n\n\n\nuno", "  dos\t\ttres"])

        with patch("fitz.open", return_value=doc):
            decoded = parser.parse(str(f))

        assert decoded.text == "《novela》\n\n第一章\n\nuno dos tres"
        assert decoded.title == "novela"

    def test_pdf_roto_devuelve_diagnostico(self, parser, tmp_path):
        f = tmp_path / "novela.pdf"
        f.write_bytes(b"no es un pdf")

        with patch("fitz.open", side_effect=RuntimeError("cannot open")):
            decoded = parser.parse(str(f))

        assert decoded.text.startswith("无法解析PDF文件: cannot open")


# ═══════════════════════════════════════════════════════════════════════════ #
#  MobiParser                                                                 #
# ═══════════════════════════════════════════════════════════════════════════ #

class TestMobiParser:

    @pytest.mark.parametrize("novel_type", [NovelType.MOBI, NovelType.AZW, NovelType.AZW3])
    def test_handles_kindle_types(self, novel_type):
        assert MobiParser().can_handle(novel_type) is True

    def test_devuelve_aviso_con_ruta_y_tamano(self, tmp_path):
        f = tmp_path / "libro.azw3"
        f.write_bytes(b"0123456789")

        decoded = MobiParser().parse(str(f))

        assert decoded.text.startswith("MOBI/AZW/AZW3格式支持待完善")
        assert f"文件路径: {f}" in decoded.text
        assert "文件大小: 10 字节" in decoded.text


# ═══════════════════════════════════════════════════════════════════════════ #
#  ParserFactory                                                              #
# ═══════════════════════════════════════════════════════════════════════════ #

class TestParserFactory:

    @pytest.fixture
    def factory(self):
        return ParserFactory()

    def test_decode_txt_por_extension(self, factory, tmp_path):
        f = tmp_path / "libro.txt"
        f.write_text("hola", encoding="utf-8")

        assert factory.decode(str(f)).text == "hola"

    def test_tipo_declarado_manda_sobre_la_extension(self, factory, tmp_path):
        f = tmp_path / "libro.dat"
        f.write_text("hola", encoding="utf-8")

        assert factory.decode(str(f), NovelType.TXT).text == "hola"

    def test_tipo_desconocido_lanza_unsupported(self, factory, tmp_path):
        f = tmp_path / "libro.docx"
        f.write_text("x")

        with pytest.raises(UnsupportedFormatError, match="no soportado"):
            factory.decode(str(f))

    def test_archivo_inexistente(self, factory, tmp_path):
        with pytest.raises(FileNotFoundError):
            factory.decode(str(tmp_path / "nada.txt"))

    def test_parser_registrado_tiene_prioridad(self, factory, tmp_path):
        class FakeTxt(BaseParser):
            types = frozenset({NovelType.TXT})

            def parse(self, file_path):
                return DecodedText(text="falso")

        f = tmp_path / "libro.txt"
        f.write_text("real", encoding="utf-8")
        factory.register(FakeTxt())

        assert factory.decode(str(f)).text == "falso"

    def test_supported_extensions(self, factory):
        assert factory.supported_extensions() == ".azw, .azw3, .epub, .mobi, .pdf, .txt"

    def test_decode_file_shortcut(self, tmp_path):
        f = tmp_path / "libro.txt"
        f.write_text("atajo", encoding="utf-8")

        assert ParserFactory.decode_file(str(f)).text == "atajo"
