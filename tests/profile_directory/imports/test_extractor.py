"""Tests for profile_directory.imports.extractor -- tagged-text record parsing."""
import pytest

from profile_directory.imports.base import DATE_MISSING, EmptyInputError, NoRecordsFoundError
from profile_directory.imports.extractor import (
    RecordBlock,
    split_blocks,
    parse_block,
    extract,
)


# ---------------------------------------------------------------------------
# RecordBlock
# ---------------------------------------------------------------------------

class TestRecordBlock:

    def test_first_returns_trimmed_value(self):
        block = RecordBlock('<title> Anna </title><id>a1</id>')
        assert block.first('title') == 'Anna'

    def test_all_returns_values_in_order(self):
        block = RecordBlock('<tg>@one</tg><id>x</id><tg>@two</tg>')
        assert block.all('tg') == ['@one', '@two']

    def test_empty_values_are_skipped(self):
        block = RecordBlock('<tg></tg><tg>  </tg><tg>@real</tg>')
        assert block.all('tg') == ['@real']

    def test_tag_names_are_case_insensitive(self):
        block = RecordBlock('<CITY>Kazan</City>')
        assert block.first('city') == 'Kazan'

    def test_value_may_span_lines(self):
        block = RecordBlock('<city>New\nYork</city>')
        assert block.first('city') == 'New\nYork'

    def test_missing_close_tag_ends_at_next_tag(self):
        block = RecordBlock('<title>Anna<id>a1</id>')
        assert block.first('title') == 'Anna'
        assert block.first('id') == 'a1'

    def test_missing_close_tag_ends_at_end_of_block(self):
        block = RecordBlock('<id>a1</id><city>Kazan')
        assert block.first('city') == 'Kazan'

    def test_has_sees_empty_tag(self):
        block = RecordBlock('<date></date>')
        assert block.has('date') is True
        assert block.first('date') is None

    def test_has_false_when_absent(self):
        assert RecordBlock('<id>1</id>').has('date') is False

    def test_similar_tag_names_do_not_collide(self):
        block = RecordBlock('<title>T</title><tel>123</tel>')
        assert block.first('tel') == '123'
        assert block.first('title') == 'T'


# ---------------------------------------------------------------------------
# split_blocks
# ---------------------------------------------------------------------------

class TestSplitBlocks:

    def test_splits_at_each_title(self):
        blocks = split_blocks('<title>A</title><id>1</id><title>B</title><id>2</id>')
        assert len(blocks) == 2
        assert blocks[0].first('id') == '1'
        assert blocks[1].first('id') == '2'

    def test_text_before_first_title_is_dropped(self):
        blocks = split_blocks('<id>orphan</id> header\n<title>A</title><id>1</id>')
        assert len(blocks) == 1
        assert blocks[0].first('id') == '1'

    def test_no_title_means_no_blocks(self):
        assert split_blocks('<id>1</id><city>X</city>') == []


# ---------------------------------------------------------------------------
# parse_block
# ---------------------------------------------------------------------------

class TestParseBlock:

    def test_full_record(self):
        block = RecordBlock(
            '<title>Anna</title><id>a-101</id><dr>25</dr><city>Moscow</city>'
            '<tags>travel, yoga</tags><nvideo>1</nvideo><girl>1</girl><boy>0</boy>'
            '<tg>@anna</tg><insta>anna.travels</insta><date>2024.03.01</date>'
        )
        record = parse_block(block)
        assert record.identificator == 'a-101'
        assert record.title == 'Anna'
        assert record.dr == '25'
        assert record.city == 'Moscow'
        assert record.tags == 'travel, yoga'
        assert record.nvideo == '1'
        assert record.girl == '1'
        assert record.boy == '0'
        assert record.date == '2024.03.01'
        assert record.socials == {'tg': ['@anna'], 'insta': ['anna.travels']}

    def test_no_id_returns_none(self):
        assert parse_block(RecordBlock('<title>Anna</title><city>X</city>')) is None

    def test_empty_id_returns_none(self):
        assert parse_block(RecordBlock('<title>Anna</title><id> </id>')) is None

    def test_missing_date_tag_is_sentinel(self):
        record = parse_block(RecordBlock('<title>A</title><id>1</id>'))
        assert record.date is DATE_MISSING
        assert record.has_date_tag is False

    def test_empty_date_tag_is_empty_string(self):
        record = parse_block(RecordBlock('<title>A</title><id>1</id><date></date>'))
        assert record.date == ''
        assert record.has_date_tag is True

    def test_duplicate_social_values_collapse(self):
        record = parse_block(RecordBlock(
            '<title>A</title><id>1</id><tg>@a</tg><tg>@b</tg><tg>@a</tg>'
        ))
        assert record.socials == {'tg': ['@a', '@b']}

    def test_unknown_tags_are_ignored(self):
        record = parse_block(RecordBlock('<title>A</title><id>1</id><myspace>x</myspace>'))
        assert record.socials == {}


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------

class TestExtract:

    def test_extracts_every_record(self, sample_dump):
        records = extract(sample_dump.decode('utf-8'))
        assert [r.identificator for r in records] == ['a-101', 'b-202']

    def test_blocks_without_id_are_skipped(self):
        records = extract('<title>A</title><title>B</title><id>b</id>')
        assert [r.identificator for r in records] == ['b']

    def test_whitespace_only_raises_empty(self):
        with pytest.raises(EmptyInputError):
            extract('  \n\t ')

    def test_empty_raises_empty(self):
        with pytest.raises(EmptyInputError):
            extract('')

    def test_no_records_raises(self):
        with pytest.raises(NoRecordsFoundError):
            extract('just some text <city>X</city>')

    def test_only_blocks_without_id_raises(self):
        with pytest.raises(NoRecordsFoundError):
            extract('<title>A</title><city>X</city>')

    def test_error_messages(self):
        assert str(EmptyInputError()) == 'Файл пустой или не найден'
        assert str(NoRecordsFoundError()) == 'Нет данных аккаунтов в файле'
