from .bom import BomMatch, detect_bom
from .sniff import sniff_embedded_encoding
from .charsets import CodecRegistry, default_codecs
from .decompress import (
    Decompressor,
    GzipDecompressor,
    DeflateDecompressor,
    BrotliDecompressor,
    select_decompressor,
)
from .pipeline import DecodePipeline, DecodeState

__all__ = [
    "BomMatch",
    "detect_bom",
    "sniff_embedded_encoding",
    "CodecRegistry",
    "default_codecs",
    "Decompressor",
    "GzipDecompressor",
    "DeflateDecompressor",
    "BrotliDecompressor",
    "select_decompressor",
    "DecodePipeline",
    "DecodeState",
]
