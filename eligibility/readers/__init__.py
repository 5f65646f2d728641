"""Tabular readers for the supported file formats."""

from ..errors import UnsupportedFileError
from .base import BaseReader, Grid, ReaderRegistry
from .csv_reader import CSVReader
from .excel_reader import ExcelReader, XlsReader

__all__ = [
    "BaseReader",
    "Grid",
    "ReaderRegistry",
    "CSVReader",
    "ExcelReader",
    "XlsReader",
    "registry",
    "read_grid",
    "read_sheets",
]

# Register readers by extension
registry = ReaderRegistry()
registry.register("csv", CSVReader)
registry.register("txt", CSVReader)
registry.register("xlsx", ExcelReader)
registry.register("xlsm", ExcelReader)
registry.register("xls", XlsReader)


def _reader_for(path) -> BaseReader:
    reader_class = registry.detect_reader(str(path))
    if reader_class is None:
        raise UnsupportedFileError(str(path))
    return reader_class()


def read_grid(path) -> Grid:
    """Read the first table of any supported file."""
    return _reader_for(path).read_grid(str(path))


def read_sheets(path) -> dict:
    return _reader_for(path).read_sheets(str(path))
