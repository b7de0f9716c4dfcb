from moyu.processor.parsers.factory import ParserFactory, UnsupportedFormatError
from moyu.processor.parsers.txt_parser import detect_encoding

__all__ = ["ParserFactory", "UnsupportedFormatError", "detect_encoding"]
