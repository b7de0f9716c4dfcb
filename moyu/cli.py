# moyu/cli.py
import logging
import re
import sys
from typing import Optional

import click
import yaml
from dotenv import load_dotenv

from moyu.factory import ReaderSession, build_session
from moyu.processor.models import NovelType
from moyu.processor.parsers import detect_encoding
from moyu.reader.service import ReaderService


# Carga .env una sola vez, antes que cualquier otra cosa
load_dotenv()

# Extensiones soportadas
_SUPPORTED_FORMATS = {".txt", ".epub", ".pdf", ".mobi", ".azw", ".azw3"}

_BOOK_OPTION = click.option(
    "--book", "-b",
    required = True,
    type     = click.Path(exists=False),   # validamos nosotros para mejor mensaje
    help     = "Ruta a la novela (.txt, .epub, .pdf, .mobi, .azw, .azw3)",
)


# ------------------------------------------------------------------
# Grupo raíz
# ------------------------------------------------------------------

@click.group()
@click.version_option(package_name="moyu-reader")
@click.option("--verbose", "-v", is_flag=True, help="Muestra el log del lector.")
def main(verbose: bool):
    """
    moyu — lector de novelas para la terminal.

    Trocea TXT, EPUB y PDF en capítulos y páginas, y recuerda
    dónde te quedaste en cada libro.
    """
    logging.basicConfig(
        level  = logging.INFO if verbose else logging.WARNING,
        format = "%(levelname)s %(name)s: %(message)s",
    )


# ------------------------------------------------------------------
# Lectura
# ------------------------------------------------------------------

@main.command()
@_BOOK_OPTION
def chapters(book: str):
    """Lista los capítulos detectados."""
    session = _open_session(book)
    try:
        reader = session.reader
        if reader.current_document.type is NovelType.TXT:
            click.echo(f"[moyu] Codificación: {detect_encoding(book)}")
        for i, title in enumerate(reader.chapter_titles()):
            marker = "▶" if i == reader.chapter_index else " "
            click.echo(f"{marker} {i + 1:>4}  {title}")
    finally:
        session.close()


@main.command()
@_BOOK_OPTION
@click.option("--chapter", "-c", type=click.IntRange(min=1), help="Capítulo (desde 1).")
@click.option("--page", "-p", type=click.IntRange(min=1), help="Página del capítulo (desde 1).")
def read(book: str, chapter: Optional[int], page: Optional[int]):
    """Muestra la página actual, o la indicada, y guarda el progreso."""
    session = _open_session(book)
    try:
        reader = session.reader

        if chapter is not None and reader.go_to_chapter(chapter - 1) is None:
            _abort(f"Capítulo {chapter} fuera de rango (1-{reader.total_chapters}).")

        if page is not None and reader.go_to_page(page - 1) is None:
            _abort(f"Página {page} fuera de rango (1-{reader.page_count}).")

        _print_page(reader, reader.current_page())
        session.save()
    finally:
        session.close()


@main.command(name="next")
@_BOOK_OPTION
def next_page(book: str):
    """Avanza una página (y de capítulo si hace falta)."""
    _step(book, ReaderService.next_page, "Ya estás en la última página.")


@main.command(name="prev")
@_BOOK_OPTION
def previous_page(book: str):
    """Retrocede una página (y de capítulo si hace falta)."""
    _step(book, ReaderService.previous_page, "Ya estás en la primera página.")


@main.command()
@_BOOK_OPTION
@click.argument("query")
def search(book: str, query: str):
    """Busca texto en todo el libro (sin distinguir mayúsculas)."""
    session = _open_session(book)
    try:
        reader = session.reader
        hits   = reader.search(query)
        if not hits:
            click.echo("[moyu] Sin resultados.")
            return

        titles = reader.chapter_titles()
        for hit in hits:
            click.echo(
                f"  {titles[hit.chapter_index]}  ·  línea {hit.line_number + 1}"
            )
        click.echo(f"[moyu] {len(hits)} coincidencias.")
    finally:
        session.close()


@main.command()
@_BOOK_OPTION
def progress(book: str):
    """Muestra el progreso guardado del libro."""
    session = _open_session(book)
    try:
        reader = session.reader
        record = reader.current_progress()
        if record is None:
            click.echo("[moyu] Todavía no has empezado este libro.")
            return
        titles = reader.chapter_titles()
        click.echo(
            f"[moyu] {titles[reader.chapter_index]} "
            f"({reader.chapter_index + 1}/{reader.total_chapters}), "
            f"página {reader.page_index + 1}/{reader.page_count}"
        )
    finally:
        session.close()


# ------------------------------------------------------------------
# Marcadores
# ------------------------------------------------------------------

@main.group()
def bookmark():
    """Gestiona los marcadores de un libro."""


@bookmark.command(name="add")
@_BOOK_OPTION
@click.argument("title")
def bookmark_add(book: str, title: str):
    """Marca la posición actual con TITLE."""
    if not title.strip():
        _abort("El título del marcador no puede estar vacío.")

    session = _open_session(book)
    try:
        created = session.reader.add_bookmark(title)
        session.save()
        click.echo(
            f"[moyu] ✓ Marcador '{created.title}' en capítulo "
            f"{created.chapter_index + 1}, página {created.page_index + 1}"
        )
    finally:
        session.close()


@bookmark.command(name="list")
@_BOOK_OPTION
def bookmark_list(book: str):
    """Lista los marcadores del libro."""
    session = _open_session(book)
    try:
        marks = session.reader.bookmarks()
        if not marks:
            click.echo("[moyu] Sin marcadores.")
            return
        for i, mark in enumerate(marks, start=1):
            click.echo(
                f"  {i:>3}  {mark.title}  "
                f"(capítulo {mark.chapter_index + 1}, página {mark.page_index + 1})"
            )
    finally:
        session.close()


@bookmark.command(name="go")
@_BOOK_OPTION
@click.argument("number", type=click.IntRange(min=1))
def bookmark_go(book: str, number: int):
    """Salta al marcador NUMBER (según 'bookmark list')."""
    session = _open_session(book)
    try:
        reader = session.reader
        mark   = _pick_bookmark(reader, number)
        if not reader.go_to_bookmark(mark):
            _abort(f"El marcador '{mark.title}' ya no apunta a un capítulo válido.")
        _print_page(reader, reader.current_page())
        session.save()
    finally:
        session.close()


@bookmark.command(name="remove")
@_BOOK_OPTION
@click.argument("number", type=click.IntRange(min=1))
def bookmark_remove(book: str, number: int):
    """Elimina el marcador NUMBER (según 'bookmark list')."""
    session = _open_session(book)
    try:
        mark = _pick_bookmark(session.reader, number)
        session.reader.remove_bookmark(mark)
        session.save()
        click.echo(f"[moyu] Marcador '{mark.title}' eliminado.")
    finally:
        session.close()


# ------------------------------------------------------------------
# Helpers de sesión
# ------------------------------------------------------------------

def _open_session(book: str) -> ReaderSession:
    """Valida el archivo, ensambla el lector y abre el libro."""
    _validate_file(book)

    try:
        session = build_session()
    except (FileNotFoundError, ValueError, yaml.YAMLError, re.error) as e:
        _abort(str(e))

    if not session.reader.open_document(book):
        session.close()
        _error(f"No se pudo abrir el libro: {book}")
        sys.exit(1)

    return session


def _step(book: str, move, at_edge_message: str) -> None:
    session = _open_session(book)
    try:
        text = move(session.reader)
        if text is None:
            click.echo(f"[moyu] {at_edge_message}")
            return
        _print_page(session.reader, text)
        session.save()
    finally:
        session.close()


def _pick_bookmark(reader: ReaderService, number: int):
    marks = reader.bookmarks()
    if number > len(marks):
        _abort(f"No existe el marcador {number} (hay {len(marks)}).")
    return marks[number - 1]


def _validate_file(path: str) -> None:
    """Verifica existencia y formato del archivo."""
    from pathlib import Path

    p = Path(path)

    if not p.exists():
        _abort(f"Archivo no encontrado: {path}")

    if not p.is_file():
        _abort(f"La ruta no es un archivo: {path}")

    if p.suffix.lower() not in _SUPPORTED_FORMATS:
        supported = ", ".join(sorted(_SUPPORTED_FORMATS))
        _abort(
            f"Formato no soportado: '{p.suffix}'\n"
            f"Formatos disponibles: {supported}"
        )


# ------------------------------------------------------------------
# Helpers de output
# ------------------------------------------------------------------

def _print_page(reader: ReaderService, text: Optional[str]) -> None:
    document = reader.current_document
    titles   = reader.chapter_titles()

    click.echo("─" * 50)
    click.echo(
        f"{document.title} · {titles[reader.chapter_index]} · "
        f"página {reader.page_index + 1}/{max(reader.page_count, 1)}"
    )
    click.echo("─" * 50)
    click.echo(text or "")


def _abort(message: str) -> None:
    """Error de validación — culpa del usuario."""
    click.echo(click.style(f"[moyu] Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _error(message: str) -> None:
    """Error de sistema — no es culpa del usuario."""
    click.echo(click.style(f"[moyu] {message}", fg="red"), err=True)
