"""Tests for blockdoc.editor: index-addressed structural edits."""

import pytest

from blockdoc import (
    DictParseCache,
    EditOperation,
    IndexOutOfRangeError,
    InvalidFieldError,
    MissingFieldError,
    apply_operation,
    edit_document,
    get_block_config,
    hash_config,
    hash_content,
    read_blocks,
    splice_blocks,
)
from blockdoc.parser import filter_filler, parse_blocks

PARAGRAPH = '<!-- core/paragraph {"id":1} -->Hello<!-- /core/paragraph -->'
HEADING = "<!-- core/heading -->Hi<!-- /core/heading -->"
QUOTE = "<!-- core/quote -->Q<!-- /core/quote -->"
SEPARATOR = "<!-- core/separator /-->"

TWO_BLOCKS = f"{PARAGRAPH}\n\n{SEPARATOR}\n"


def _names(text: str) -> list[str | None]:
    return [b.block_name for b in read_blocks(text)]


class TestInsert:
    """insert splices new blocks before the block at index."""

    def test_insert_at_start(self) -> None:
        result = apply_operation(PARAGRAPH, "insert", content=HEADING, index=0)
        assert result.text == HEADING + PARAGRAPH
        assert [(b.index, b.block_name) for b in result.blocks] == [
            (0, "core/heading"),
            (1, "core/paragraph"),
        ]
        assert result.blocks[1].attrs == {"id": 1}

    def test_insert_at_length_appends(self) -> None:
        result = apply_operation(TWO_BLOCKS, "insert", content=HEADING, index=2)
        assert _names(result.text) == ["core/paragraph", "core/separator", "core/heading"]

    def test_insert_past_end_clamps(self) -> None:
        at_end = edit_document(TWO_BLOCKS, "insert", content=HEADING, index=2)
        past_end = edit_document(TWO_BLOCKS, "insert", content=HEADING, index=99)
        assert past_end == at_end

    def test_insert_multiple_blocks(self) -> None:
        result = apply_operation(TWO_BLOCKS, "insert", content=f"{HEADING}\n{QUOTE}", index=1)
        assert _names(result.text) == [
            "core/paragraph",
            "core/heading",
            "core/quote",
            "core/separator",
        ]

    def test_insert_content_filler_is_dropped(self) -> None:
        result = apply_operation(PARAGRAPH, "insert", content=f"loose text {HEADING} more", index=1)
        assert result.text == PARAGRAPH + HEADING

    def test_insert_into_empty_document(self) -> None:
        result = apply_operation("", "insert", content=HEADING, index=0)
        assert result.text == HEADING

    def test_insert_without_blocks_in_content_is_no_op(self) -> None:
        result = apply_operation(PARAGRAPH, "insert", content="<p>plain</p>", index=0)
        assert result.text == PARAGRAPH

    def test_insert_requires_index(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            edit_document(PARAGRAPH, "insert", content=HEADING)
        assert exc_info.value.code == "missing_index"

    def test_insert_requires_content(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            edit_document(PARAGRAPH, "insert", index=0)
        assert exc_info.value.code == "missing_content"
        assert str(exc_info.value) == "The content field is required for insert."

    def test_index_checked_before_content(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            edit_document(PARAGRAPH, "insert")
        assert exc_info.value.field == "index"


class TestRemove:
    """remove deletes exactly one top-level block."""

    def test_remove_first(self) -> None:
        result = apply_operation(TWO_BLOCKS, "remove", index=0)
        assert result.text == SEPARATOR
        assert [(b.index, b.block_name) for b in result.blocks] == [(0, "core/separator")]

    def test_remove_last(self) -> None:
        result = apply_operation(TWO_BLOCKS, "remove", index=1)
        assert result.text == PARAGRAPH

    def test_remove_out_of_range(self) -> None:
        with pytest.raises(IndexOutOfRangeError) as exc_info:
            apply_operation(TWO_BLOCKS, "remove", index=5)
        assert exc_info.value.index == 5
        assert exc_info.value.length == 2
        assert exc_info.value.code == "invalid_index"

    def test_remove_at_length_is_out_of_range(self) -> None:
        with pytest.raises(IndexOutOfRangeError):
            edit_document(TWO_BLOCKS, "remove", index=2)

    def test_remove_from_empty_document(self) -> None:
        with pytest.raises(IndexOutOfRangeError):
            edit_document("", "remove", index=0)

    def test_remove_ignores_content(self) -> None:
        text = edit_document(TWO_BLOCKS, "remove", content=HEADING, index=0)
        assert text == SEPARATOR

    def test_remove_requires_index(self) -> None:
        with pytest.raises(MissingFieldError):
            edit_document(TWO_BLOCKS, "remove")


class TestReplace:
    """replace swaps one block for the parsed content."""

    def test_replace_with_single_block(self) -> None:
        result = apply_operation(TWO_BLOCKS, "replace", content=HEADING, index=1)
        assert result.text == PARAGRAPH + HEADING

    def test_replace_with_several_blocks(self) -> None:
        result = apply_operation(TWO_BLOCKS, "replace", content=HEADING + QUOTE, index=0)
        assert [(b.index, b.block_name) for b in result.blocks] == [
            (0, "core/heading"),
            (1, "core/quote"),
            (2, "core/separator"),
        ]

    def test_replace_with_nothing_removes(self) -> None:
        result = apply_operation(TWO_BLOCKS, "replace", content="", index=0)
        assert result.text == SEPARATOR

    def test_replace_out_of_range(self) -> None:
        with pytest.raises(IndexOutOfRangeError):
            edit_document(TWO_BLOCKS, "replace", content=HEADING, index=2)

    def test_replace_requires_content(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            edit_document(TWO_BLOCKS, "replace", index=0)
        assert exc_info.value.code == "missing_content"

    def test_missing_content_reported_before_range(self) -> None:
        with pytest.raises(MissingFieldError):
            edit_document(TWO_BLOCKS, "replace", index=10)


class TestReplaceAll:
    """replace_all stores content verbatim."""

    def test_content_stored_verbatim(self) -> None:
        content = f"  intro\n{HEADING}\n\n<p>tail</p>"
        result = apply_operation(PARAGRAPH, "replace_all", content=content)
        assert result.text == content
        assert [b.block_name for b in result.blocks] == ["core/heading"]

    def test_ignores_index(self) -> None:
        assert edit_document(PARAGRAPH, "replace_all", content=HEADING, index=9) == HEADING

    def test_empty_content_clears_document(self) -> None:
        result = apply_operation(PARAGRAPH, "replace_all", content="")
        assert result.text == ""
        assert result.blocks == ()

    def test_requires_content(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            edit_document(PARAGRAPH, "replace_all")
        assert exc_info.value.code == "missing_content"


class TestOperationValidation:
    """Operation names and field types."""

    def test_enum_member_accepted(self) -> None:
        text = edit_document(PARAGRAPH, EditOperation.INSERT, content=HEADING, index=0)
        assert text == HEADING + PARAGRAPH

    def test_unknown_operation(self) -> None:
        with pytest.raises(InvalidFieldError) as exc_info:
            edit_document(PARAGRAPH, "append", content=HEADING)
        assert exc_info.value.field == "operation"

    def test_negative_index(self) -> None:
        with pytest.raises(InvalidFieldError):
            edit_document(PARAGRAPH, "remove", index=-1)

    def test_bool_index(self) -> None:
        with pytest.raises(InvalidFieldError):
            edit_document(PARAGRAPH, "remove", index=True)  # type: ignore[arg-type]

    def test_non_string_content(self) -> None:
        with pytest.raises(InvalidFieldError):
            edit_document(PARAGRAPH, "replace_all", content=42)  # type: ignore[arg-type]

    def test_requires_content_property(self) -> None:
        assert EditOperation.INSERT.requires_content
        assert not EditOperation.REMOVE.requires_content


class TestSpliceBlocks:
    """splice_blocks works on filtered node tuples."""

    def test_input_not_modified(self) -> None:
        blocks = filter_filler(parse_blocks(TWO_BLOCKS))
        new = filter_filler(parse_blocks(HEADING))
        result = splice_blocks(blocks, EditOperation.REPLACE, 0, new)
        assert len(blocks) == 2
        assert [b.name for b in result] == ["core/heading", "core/separator"]

    def test_replace_all_has_no_splice_form(self) -> None:
        with pytest.raises(ValueError, match="replace_all"):
            splice_blocks((), EditOperation.REPLACE_ALL, 0)


class TestChainedEdits:
    """Indices from a response describe the post-edit document."""

    def test_indices_shift_after_insert(self) -> None:
        first = apply_operation(TWO_BLOCKS, "insert", content=HEADING, index=0)
        separator_index = next(
            b.index for b in first.blocks if b.block_name == "core/separator"
        )
        assert separator_index == 2
        second = apply_operation(first.text, "remove", index=separator_index)
        assert _names(second.text) == ["core/heading", "core/paragraph"]


class TestNonFiniteAttributes:
    """Overflowing attribute numbers never reach the output as Infinity."""

    SOURCE = '<!-- core/a {"x":1e400} -->Hi<!-- /core/a --><!-- core/b -->B<!-- /core/b -->'

    def test_read_excludes_unrepresentable_block(self) -> None:
        assert _names(self.SOURCE) == ["core/b"]

    def test_edit_never_writes_infinity(self) -> None:
        result = apply_operation(self.SOURCE, "insert", content=HEADING, index=0)
        assert "Infinity" not in result.text
        assert [b.block_name for b in result.blocks] == ["core/heading", "core/b"]
        assert read_blocks(result.text) == result.blocks


class TestEditWithCache:
    """The current document is parsed through the supplied cache."""

    def test_document_parse_is_cached(self) -> None:
        cache = DictParseCache()
        edit_document(TWO_BLOCKS, "remove", index=0, cache=cache)
        key = (hash_content(TWO_BLOCKS), hash_config(get_block_config()))
        assert cache.get(*key) == parse_blocks(TWO_BLOCKS)

    def test_cached_and_uncached_edits_agree(self) -> None:
        cache = DictParseCache()
        first = apply_operation(TWO_BLOCKS, "insert", content=HEADING, index=1, cache=cache)
        second = apply_operation(TWO_BLOCKS, "insert", content=HEADING, index=1, cache=cache)
        assert first == second == apply_operation(TWO_BLOCKS, "insert", content=HEADING, index=1)
