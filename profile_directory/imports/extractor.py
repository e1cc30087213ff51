"""
Record extraction from the tagged-text dump.

The dump is a flat stream of pseudo-XML fields with no per-record wrapper:

    <title>Anna</title><id>a-101</id><dr>25</dr><city>Москва</city>
    <tg>@anna</tg><tg>@anna_backup</tg><tags>travel, yoga</tags><date>2024.03.01</date>
    <title>Boris</title><id>b-202</id>...

<title> opens every record and never appears inside a value, so records are
cut at each <title>. Inside a block any tag may be missing, appear once, or
repeat (social handles). Matching is forgiving: tag names are
case-insensitive, values may span lines, and a missing close tag ends the
value at the next '<' or at the end of the block.
"""
import logging
import re
from functools import lru_cache
from typing import List, Optional

from profile_directory.config import SOCIAL_TYPES
from profile_directory.imports.base import (
    RawRecord, DATE_MISSING, EmptyInputError, NoRecordsFoundError,
)

logger = logging.getLogger('imports.extractor')

TITLE_TAG = 'title'
SOCIAL_TAGS = tuple(SOCIAL_TYPES)

_TITLE_SPLIT = re.compile(r'<\s*title\s*>', re.IGNORECASE)


@lru_cache(maxsize=64)
def _open_pattern(tag: str):
    return re.compile(r'<\s*' + re.escape(tag) + r'\s*>', re.IGNORECASE)


@lru_cache(maxsize=64)
def _value_pattern(tag: str):
    return re.compile(
        r'<\s*' + re.escape(tag) + r'\s*>(.*?)(?:<\s*/\s*' + re.escape(tag) + r'\s*>|(?=<)|\Z)',
        re.IGNORECASE | re.DOTALL,
    )


class RecordBlock:
    """The text of one record plus generic field accessors."""

    def __init__(self, text: str):
        self.text = text

    def has(self, tag: str) -> bool:
        """True if the tag is present at all, even with an empty value."""
        return _open_pattern(tag).search(self.text) is not None

    def all(self, tag: str) -> List[str]:
        """Every non-empty value of `tag`, trimmed, in document order."""
        values = []
        for m in _value_pattern(tag).finditer(self.text):
            value = m.group(1).strip()
            if value:
                values.append(value)
        return values

    def first(self, tag: str) -> Optional[str]:
        values = self.all(tag)
        return values[0] if values else None


def split_blocks(text: str) -> List[RecordBlock]:
    """Cut the dump at every <title>; anything before the first one is dropped."""
    parts = _TITLE_SPLIT.split(text)
    return [RecordBlock('<title>' + part) for part in parts[1:]]


def parse_block(block: RecordBlock) -> Optional[RawRecord]:
    """Build a RawRecord from one block, or None if it has no identifier."""
    identificator = block.first('id')
    if not identificator:
        return None

    if block.has('date'):
        date = block.first('date') or ''
    else:
        date = DATE_MISSING

    socials = {}
    for tag in SOCIAL_TAGS:
        values = block.all(tag)
        if values:
            socials[tag] = list(dict.fromkeys(values))  # de-dup, keep order

    return RawRecord(
        identificator=identificator,
        title=block.first(TITLE_TAG),
        dr=block.first('dr'),
        city=block.first('city'),
        tags=block.first('tags'),
        nvideo=block.first('nvideo'),
        girl=block.first('girl'),
        boy=block.first('boy'),
        date=date,
        socials=socials,
    )


def extract(text: str) -> List[RawRecord]:
    """
    Parse the whole dump.

    Raises:
        EmptyInputError: nothing but whitespace
        NoRecordsFoundError: no block carried both <title> and <id>
    """
    if not text or not text.strip():
        raise EmptyInputError()

    records = []
    skipped = 0
    for block in split_blocks(text):
        record = parse_block(block)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.debug("Skipped %d block(s) without <id>", skipped)
    if not records:
        raise NoRecordsFoundError()

    logger.info("Extracted %d record(s) from dump", len(records))
    return records
