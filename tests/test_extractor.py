"""Tests for block ID definition and reference extraction."""
import pytest

from blockid_janitor.analyzer.extractor import (
    BlockIdExtractor,
    is_valid_block_id,
    match_block_id,
)


def resolver_for(known):
    """Resolve targets by exact name against a {target: path} dict."""
    calls = []

    def resolve(target, source):
        calls.append((target, source))
        return known.get(target)

    resolve.calls = calls
    return resolve


@pytest.fixture
def extractor():
    return BlockIdExtractor(resolver_for({'A': 'A.md', 'B': 'B.md', '': 'A.md'}))


class TestDefinitions:
    """Trailing ^block-id tags."""

    @pytest.mark.parametrize("line, expected", [
        ("Some text. ^abc123", "abc123"),
        ("Some text.^abc123", "abc123"),
        ("Some text.\t  ^abc-123_x", "abc-123_x"),
        ("^only-tag", "only-tag"),
        ("- list item ^Item9", "Item9"),
    ])
    def test_matches_trailing_tag(self, line, expected):
        match = match_block_id(line)
        assert match is not None
        assert match.group('block_id') == expected

    @pytest.mark.parametrize("line", [
        "Some text. ^abc123 trailing",
        "Some text. ^abc123 ",
        "Some text. ^abc!",
        "Some text. ^",
        "No tag here",
        "Accented ^café",
    ])
    def test_rejects_non_tags(self, line):
        assert match_block_id(line) is None

    def test_crlf_line_terminator_is_not_content(self):
        match = match_block_id("Some text. ^abc123\r")
        assert match.group('block_id') == 'abc123'

    def test_only_last_tag_on_line_is_the_definition(self):
        match = match_block_id("a ^first ^second")
        assert match.group('block_id') == 'second'

    def test_validity_predicate(self):
        assert is_valid_block_id('abc-123_X')
        assert not is_valid_block_id('')
        assert not is_valid_block_id('abc def')
        assert not is_valid_block_id('abc^')

    def test_definition_coordinates(self, extractor):
        content = "# Title\n\nParagraph one. ^p1\nParagraph two. ^p2"
        result = extractor.extract(content, 'A.md')

        assert [(d.block_id, d.line_index, d.line) for d in result.definitions] == [
            ('p1', 2, 'Paragraph one. ^p1'),
            ('p2', 3, 'Paragraph two. ^p2'),
        ]
        assert all(d.file_path == 'A.md' for d in result.definitions)
        assert result.definitions[0].line_number == 3

    def test_duplicate_id_last_occurrence_wins(self, extractor):
        """Known limitation: only the last line carrying a repeated id is kept."""
        content = "first ^dup\nmiddle\nsecond ^dup"
        result = extractor.extract(content, 'A.md')

        assert len(result.definitions) == 1
        assert result.definitions[0].line_index == 2
        assert result.definitions[0].line == 'second ^dup'

    def test_display_line_is_stripped(self, extractor):
        result = extractor.extract("   indented ^x1  \n    indented ^x2", 'A.md')
        assert [d.display_line for d in result.definitions] == ['indented ^x2']


class TestReferences:
    """[[target#^id]] links."""

    def test_plain_reference(self, extractor):
        result = extractor.extract("See [[A#^abc123]].", 'B.md')
        assert result.references == frozenset({('A.md', 'abc123')})

    @pytest.mark.parametrize("line", [
        "[[A#^abc123|see here]]",
        "[[A#^abc123 | see here]]",
        "[[A#^abc123 |see here]]",
        "![[A#^abc123]]",
    ])
    def test_reference_variants(self, extractor, line):
        result = extractor.extract(line, 'B.md')
        assert result.references == frozenset({('A.md', 'abc123')})

    def test_multiple_references_on_one_line(self, extractor):
        result = extractor.extract("[[A#^one]] and [[B#^two|2]] and [[A#^three]]", 'B.md')
        assert result.references == frozenset({
            ('A.md', 'one'), ('B.md', 'two'), ('A.md', 'three'),
        })

    def test_preceding_plain_link_does_not_swallow_target(self, extractor):
        result = extractor.extract("[[B]] then [[A#^abc]]", 'B.md')
        assert result.references == frozenset({('A.md', 'abc')})

    def test_display_text_may_contain_a_bracket(self, extractor):
        result = extractor.extract("[[A#^x|a]b]] and [[B#^y]]", 'B.md')
        assert result.references == frozenset({('A.md', 'x'), ('B.md', 'y')})

    def test_heading_links_are_not_block_references(self, extractor):
        result = extractor.extract("[[A#Heading]] and [[A]]", 'B.md')
        assert result.references == frozenset()

    def test_unresolved_reference_is_dropped(self, extractor):
        result = extractor.extract("[[Nonexistent#^abc123]]", 'B.md')
        assert result.references == frozenset()
        assert result.unresolved_count == 1

    def test_resolver_receives_source_document(self):
        resolve = resolver_for({'A': 'A.md'})
        BlockIdExtractor(resolve).extract("x\n[[ A #^abc]]", 'notes/B.md')
        assert resolve.calls == [('A', 'notes/B.md')]

    def test_line_can_define_and_reference(self, extractor):
        result = extractor.extract("See [[B#^other]] ^mine", 'A.md')
        assert [d.block_id for d in result.definitions] == ['mine']
        assert result.references == frozenset({('B.md', 'other')})

    def test_empty_target_is_passed_to_resolver(self, extractor):
        result = extractor.extract("[[#^local]]", 'A.md')
        assert result.references == frozenset({('A.md', 'local')})
