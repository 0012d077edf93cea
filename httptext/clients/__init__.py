from .base import BaseFetch
from .data import DataFetch
from .file import FileFetch

__all__ = [
    "BaseFetch",
    "DataFetch",
    "FileFetch",
]
