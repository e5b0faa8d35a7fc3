"""Tests for entity reference extraction from editor documents."""
import copy
from uuid import uuid4

from services.reference_extractor import (
    extract_references,
    iter_nodes,
    plain_text,
    reference_from_mark,
)
from tests.factories import document, reference_mark, text_node

WORD_ID = str(uuid4())
VERSE_ID = str(uuid4())


def test__extract_references__empty_inputs() -> None:
    assert extract_references(None) == []
    assert extract_references({}) == []
    assert extract_references(document()) == []


def test__extract_references__finds_marks_in_document_order() -> None:
    doc = document(
        [text_node('See '), text_node('كتاب', reference_mark('word', WORD_ID, 'كتاب'))],
        [text_node('2:255', reference_mark('verse', VERSE_ID, '2:255'))],
    )
    references = extract_references(doc)

    assert [(r.target_type, r.target_id, r.display_text) for r in references] == [
        ('word', WORD_ID, 'كتاب'),
        ('verse', VERSE_ID, '2:255'),
    ]


def test__extract_references__deduplicates_keeping_first_display_text() -> None:
    doc = document(
        [text_node('first', reference_mark('word', WORD_ID, 'first'))],
        [text_node('second', reference_mark('word', WORD_ID, 'second'))],
    )
    references = extract_references(doc)

    assert len(references) == 1
    assert references[0].display_text == 'first'
    assert references[0].key == f'word:{WORD_ID}'


def test__extract_references__same_id_different_type_is_distinct() -> None:
    doc = document([
        text_node('a', reference_mark('word', WORD_ID, 'a')),
        text_node('b', reference_mark('root', WORD_ID, 'b')),
    ])
    assert [r.target_type for r in extract_references(doc)] == ['word', 'root']


def test__extract_references__is_idempotent_and_does_not_mutate() -> None:
    doc = document([text_node('كتاب', reference_mark('word', WORD_ID, 'كتاب'))])
    snapshot = copy.deepcopy(doc)

    assert extract_references(doc) == extract_references(doc)
    assert doc == snapshot


def test__extract_references__ignores_other_and_incomplete_marks() -> None:
    doc = document([
        text_node('bold', {'type': 'bold'}),
        text_node('no attrs', {'type': 'entityReference'}),
        text_node('no id', {'type': 'entityReference', 'attrs': {'targetType': 'word'}}),
        text_node('bad', 'not-a-mark'),
    ])
    assert extract_references(doc) == []


def test__extract_references__missing_display_text_is_empty() -> None:
    mark = {'type': 'entityReference', 'attrs': {'targetType': 'word', 'targetId': WORD_ID}}
    reference = reference_from_mark(mark)
    assert reference is not None
    assert reference.display_text == ''


def test__extract_references__deeply_nested_document() -> None:
    leaf = text_node('deep', reference_mark('word', WORD_ID, 'deep'))
    node = {'type': 'paragraph', 'content': [leaf]}
    for _ in range(5000):
        node = {'type': 'blockquote', 'content': [node]}
    references = extract_references({'type': 'doc', 'content': [node]})

    assert [r.target_id for r in references] == [WORD_ID]


def test__extract_references__marks_on_non_text_nodes() -> None:
    doc = {
        'type': 'doc',
        'content': [
            {'type': 'image', 'marks': [reference_mark('verse', VERSE_ID, '2:255')]},
        ],
    }
    assert [r.target_type for r in extract_references(doc)] == ['verse']


def test__iter_nodes__pre_order_and_skips_non_dicts() -> None:
    doc = {
        'type': 'doc',
        'content': [
            {'type': 'a', 'content': [{'type': 'a1'}, 'junk', {'type': 'a2'}]},
            {'type': 'b'},
        ],
    }
    assert [n['type'] for n in iter_nodes(doc)] == ['doc', 'a', 'a1', 'a2', 'b']
    assert list(iter_nodes(None)) == []


class TestPlainText:
    """Tests for plain_text."""

    def test__plain_text__joins_blocks_with_newlines(self) -> None:
        doc = document(
            [text_node('In the name '), text_node('of God')],
            [text_node('بسم الله')],
        )
        assert plain_text(doc) == 'In the name of God\nبسم الله'

    def test__plain_text__empty(self) -> None:
        assert plain_text(None) == ''
        assert plain_text(document([])) == ''
