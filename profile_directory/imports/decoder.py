"""
Upload decoding: UTF-8 first, legacy Windows-1251 when that fails.

Older dumps were saved by desktop tools that wrote cp1251; nobody declares the
encoding, so we guess by trying the strict decode first.  The fallback is
lenient: cp1251 leaves 0x98 unassigned, and that byte becomes U+FFFD instead
of failing the whole upload.
"""
import codecs
import logging

from profile_directory.config import IMPORT_PRIMARY_ENCODING, IMPORT_FALLBACK_ENCODING
from profile_directory.imports.base import DecodeError

logger = logging.getLogger('imports.decoder')


def decode(data: bytes, primary: str = None, fallback: str = None) -> str:
    """Decode an uploaded byte buffer to text."""
    primary = primary or IMPORT_PRIMARY_ENCODING
    fallback = fallback or IMPORT_FALLBACK_ENCODING

    try:
        primary_name = codecs.lookup(primary).name
        codecs.lookup(fallback)
    except LookupError as e:
        raise DecodeError(f"Неизвестная кодировка: {e}") from e

    if primary_name == 'utf-8' and data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]

    try:
        return data.decode(primary, errors='strict')
    except UnicodeDecodeError as e:
        logger.info("Upload is not valid %s (byte %d), retrying as %s", primary, e.start, fallback)

    return data.decode(fallback, errors='replace')
