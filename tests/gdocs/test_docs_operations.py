"""
Unit tests for the core document operations, run against FakeDocsGateway.

Resulting document text is checked by replaying each recorded batch on the
sample body, so misplaced indices show up as garbled text.
"""

import pytest

from doc_builders import (
    SAMPLE_PARAGRAPHS,
    SAMPLE_TEXT,
    FakeDocsGateway,
    apply_to_text,
    create_mock_doc,
    create_mock_runs_paragraph,
    create_mock_tab,
)
from gdocs import docs_operations
from gdocs.docs_gateway import DocumentSummary
from gdocs.docs_helpers import DeleteRange, InsertText, SetParagraphStyle, SetTextStyle
from gdocs.docs_model import TextStyle
from gdocs.errors import (
    ErrorCode,
    InvalidParameterError,
    InvalidRangeError,
    NotFoundError,
    RemoteRejectedError,
)

BOLD = TextStyle(bold=True)


def replay(gateway: FakeDocsGateway, text: str = SAMPLE_TEXT) -> str:
    for batch in gateway.batches:
        text = apply_to_text(text, batch)
    return text


@pytest.fixture
def tabbed_gateway():
    doc = create_mock_doc(SAMPLE_PARAGRAPHS)
    doc["tabs"] = [
        create_mock_tab("t.0", "Main", SAMPLE_PARAGRAPHS),
        create_mock_tab("t.1", "Notes", [("Todo", "HEADING_2"), ("item", "NORMAL_TEXT")]),
    ]
    return FakeDocsGateway(doc)


@pytest.fixture
def styled_gateway():
    doc = {
        "documentId": "doc-123",
        "title": "Styled",
        "revisionId": "rev-1",
        "body": {
            "content": [
                {"endIndex": 1, "sectionBreak": {"sectionStyle": {}}},
                create_mock_runs_paragraph([("Hello ", {}), ("World\n", {"bold": True})], 1),
            ]
        },
    }
    return FakeDocsGateway(doc)


class TestReadAsMarkdown:
    @pytest.mark.asyncio
    async def test_headings_and_paragraphs(self, gateway):
        markdown = await docs_operations.read_as_markdown(gateway, "doc-123")

        assert markdown.startswith("# Intro\n")
        assert "Hello world" in markdown
        assert "# Conclusion" in markdown

    @pytest.mark.asyncio
    async def test_reads_one_tab_by_title(self, tabbed_gateway):
        markdown = await docs_operations.read_as_markdown(tabbed_gateway, "doc-123", tab_id="notes")

        assert "## Todo" in markdown
        assert "Intro" not in markdown

    @pytest.mark.asyncio
    async def test_invalid_document_id_is_not_fetched(self, gateway):
        with pytest.raises(InvalidParameterError) as exc_info:
            await docs_operations.read_as_markdown(gateway, "")

        assert exc_info.value.code == ErrorCode.INVALID_DOCUMENT_ID.value
        assert gateway.fetch_calls == []

    @pytest.mark.asyncio
    async def test_missing_document(self, missing_gateway):
        with pytest.raises(NotFoundError):
            await docs_operations.read_as_markdown(missing_gateway, "doc-123")


class TestWriteMarkdown:
    @pytest.mark.asyncio
    async def test_rewrites_whole_body(self, gateway):
        result = await docs_operations.write_markdown(gateway, "doc-123", "# Title\nSome **bold** text")

        assert gateway.batches[0] == [DeleteRange(1, 48)]
        assert gateway.batch_revisions == ["rev-1", "rev-2"]
        assert replay(gateway) == "Title\nSome bold text\n"
        assert SetTextStyle(12, 16, BOLD) in gateway.batches[1]
        assert result.revision_id == "rev-3"

    @pytest.mark.asyncio
    async def test_second_batch_failure_propagates(self, sample_doc):
        gateway = FakeDocsGateway(sample_doc, reject_batch=2)

        with pytest.raises(RemoteRejectedError):
            await docs_operations.write_markdown(gateway, "doc-123", "New")

        assert len(gateway.batches) == 2


class TestFindDocumentHeadings:
    @pytest.mark.asyncio
    async def test_lists_headings_in_order(self, gateway):
        headings = await docs_operations.find_document_headings(gateway, "doc-123")

        assert [(h.text, h.start_index, h.end_index) for h in headings] == [
            ("Intro", 1, 7),
            ("Body", 19, 24),
            ("Conclusion", 34, 45),
        ]
        assert headings[0].level == "HEADING_1"


class TestInsertAfterHeading:
    @pytest.mark.asyncio
    async def test_inserts_at_section_start(self, gateway):
        result = await docs_operations.insert_after_heading(gateway, "doc-123", "Intro", "New")

        assert gateway.batches == [
            [InsertText(7, "New\n"), SetTextStyle(7, 10, None), SetParagraphStyle(7, 11, "NORMAL_TEXT")]
        ]
        assert replay(gateway) == "Intro\nNew\nHello world\nBody\nBody text\nConclusion\nBye\n"
        assert (result.start_index, result.end_index) == (7, 11)

    @pytest.mark.asyncio
    async def test_heading_match_ignores_case(self, gateway):
        await docs_operations.insert_after_heading(gateway, "doc-123", "  body ", "x")

        assert gateway.batches[0][0] == InsertText(24, "x\n")

    @pytest.mark.asyncio
    async def test_style_overlay_stops_before_newline(self, gateway):
        await docs_operations.insert_after_heading(gateway, "doc-123", "Intro", "New", style=BOLD)

        assert gateway.batches[0][-1] == SetTextStyle(7, 10, BOLD)

    @pytest.mark.asyncio
    async def test_missing_heading_writes_nothing(self, gateway):
        with pytest.raises(NotFoundError) as exc_info:
            await docs_operations.insert_after_heading(gateway, "doc-123", "Appendix", "x")

        assert exc_info.value.code == ErrorCode.HEADING_NOT_FOUND.value
        assert gateway.batches == []

    @pytest.mark.asyncio
    async def test_heading_at_document_end(self):
        gateway = FakeDocsGateway(
            create_mock_doc([("Intro", "HEADING_1"), ("Hello", "NORMAL_TEXT"), ("End", "HEADING_1")])
        )

        result = await docs_operations.insert_after_heading(gateway, "doc-123", "End", "Tail")

        ops = gateway.batches[0]
        assert ops[:2] == [InsertText(16, "\n"), InsertText(17, "Tail")]
        assert replay(gateway, "Intro\nHello\nEnd\n") == "Intro\nHello\nEnd\nTail\n"
        assert (result.start_index, result.end_index) == (17, 21)

    @pytest.mark.asyncio
    async def test_targets_tab(self, tabbed_gateway):
        await docs_operations.insert_after_heading(tabbed_gateway, "doc-123", "Todo", "x", tab_id="notes")

        assert tabbed_gateway.batches[0][0] == InsertText(6, "x\n", "t.1")
        assert all(op.tab_id == "t.1" for op in tabbed_gateway.all_operations)

    @pytest.mark.asyncio
    async def test_missing_tab(self, tabbed_gateway):
        with pytest.raises(NotFoundError) as exc_info:
            await docs_operations.insert_after_heading(tabbed_gateway, "doc-123", "Todo", "x", tab_id="Archive")

        assert exc_info.value.code == ErrorCode.TAB_NOT_FOUND.value


class TestAppendToSection:
    @pytest.mark.asyncio
    async def test_appends_before_next_heading(self, gateway):
        result = await docs_operations.append_to_section(gateway, "doc-123", "Body", "Appended")

        assert gateway.batches == [
            [
                InsertText(34, "Appended\n"),
                SetTextStyle(34, 42, None),
                SetParagraphStyle(34, 43, "NORMAL_TEXT"),
            ]
        ]
        assert replay(gateway) == "Intro\nHello world\nBody\nBody text\nAppended\nConclusion\nBye\n"
        assert (result.start_index, result.end_index) == (34, 43)

    @pytest.mark.asyncio
    async def test_last_section_starts_new_paragraph(self, gateway):
        result = await docs_operations.append_to_section(gateway, "doc-123", "Conclusion", "More")

        assert gateway.batches[0][:4] == [
            InsertText(48, "\n"),
            InsertText(49, "More"),
            SetTextStyle(49, 53, None),
            SetParagraphStyle(49, 53, "NORMAL_TEXT"),
        ]
        assert replay(gateway).endswith("Bye\nMore\n")
        assert (result.start_index, result.end_index) == (49, 53)

    @pytest.mark.asyncio
    async def test_last_section_style_covers_new_text_only(self, gateway):
        await docs_operations.append_to_section(gateway, "doc-123", "Conclusion", "More", style=BOLD)

        assert gateway.batches[0][-1] == SetTextStyle(49, 53, BOLD)


class TestReplaceSection:
    @pytest.mark.asyncio
    async def test_preserves_heading(self, gateway):
        result = await docs_operations.replace_section(gateway, "doc-123", "Intro", "X")

        assert gateway.batches[0][:2] == [DeleteRange(7, 19), InsertText(7, "X\n")]
        assert replay(gateway) == "Intro\nX\nBody\nBody text\nConclusion\nBye\n"
        assert (result.start_index, result.end_index) == (7, 9)

    @pytest.mark.asyncio
    async def test_replaces_heading_too(self, gateway):
        await docs_operations.replace_section(
            gateway, "doc-123", "Intro", "# New Intro\nText", preserve_heading=False
        )

        assert gateway.batches[0][0] == DeleteRange(1, 19)
        assert SetParagraphStyle(1, 11, "HEADING_1") in gateway.batches[0]
        assert replay(gateway) == "New Intro\nText\nBody\nBody text\nConclusion\nBye\n"

    @pytest.mark.asyncio
    async def test_up_to_end_heading(self, gateway):
        await docs_operations.replace_section(
            gateway, "doc-123", "Intro", "Merged", end_heading="Conclusion"
        )

        assert replay(gateway) == "Intro\nMerged\nConclusion\nBye\n"

    @pytest.mark.asyncio
    async def test_last_section_keeps_trailing_newline(self, gateway):
        result = await docs_operations.replace_section(gateway, "doc-123", "Conclusion", "Farewell")

        assert gateway.batches[0][:2] == [DeleteRange(45, 48), InsertText(45, "Farewell")]
        assert replay(gateway).endswith("Conclusion\nFarewell\n")
        assert (result.start_index, result.end_index) == (45, 53)

    @pytest.mark.asyncio
    async def test_end_heading_before_start(self, gateway):
        with pytest.raises(InvalidRangeError):
            await docs_operations.replace_section(
                gateway, "doc-123", "Conclusion", "x", end_heading="Intro"
            )

        assert gateway.batches == []

    @pytest.mark.asyncio
    async def test_remote_rejection_propagates(self, sample_doc):
        gateway = FakeDocsGateway(sample_doc, reject_batch=1)

        with pytest.raises(RemoteRejectedError):
            await docs_operations.replace_section(gateway, "doc-123", "Intro", "x")


class TestGetStyleAt:
    @pytest.mark.asyncio
    async def test_single_character(self, styled_gateway):
        ranges = await docs_operations.get_style_at(styled_gateway, "doc-123", 7)

        assert len(ranges) == 1
        assert ranges[0].text == "W"
        assert ranges[0].style.bold is True

    @pytest.mark.asyncio
    async def test_range_spanning_runs(self, styled_gateway):
        ranges = await docs_operations.get_style_at(styled_gateway, "doc-123", 5, 9)

        assert [(r.start_index, r.end_index, r.text) for r in ranges] == [(5, 7, "o "), (7, 9, "Wo")]
        assert ranges[0].style.bold is None

    @pytest.mark.asyncio
    async def test_out_of_bounds(self, styled_gateway):
        with pytest.raises(InvalidRangeError):
            await docs_operations.get_style_at(styled_gateway, "doc-123", 1, 20)


class TestApplyTextStyle:
    @pytest.mark.asyncio
    async def test_clamps_to_body(self, gateway):
        result = await docs_operations.apply_text_style(gateway, "doc-123", 1, 500, BOLD)

        assert gateway.batches == [[SetTextStyle(1, 49, BOLD)]]
        assert (result.start_index, result.end_index) == (1, 49)

    @pytest.mark.asyncio
    async def test_empty_style_is_rejected(self, gateway):
        with pytest.raises(InvalidParameterError):
            await docs_operations.apply_text_style(gateway, "doc-123", 1, 5, TextStyle())

        assert gateway.fetch_calls == []

    @pytest.mark.asyncio
    async def test_inverted_range(self, gateway):
        with pytest.raises(InvalidRangeError):
            await docs_operations.apply_text_style(gateway, "doc-123", 10, 5, BOLD)

        assert gateway.batches == []


class TestParseStyle:
    def test_none(self):
        assert docs_operations.parse_style(None) is None

    def test_valid(self):
        assert docs_operations.parse_style({"bold": True, "font_size": 14}) == TextStyle(bold=True, font_size=14)

    def test_unknown_field(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            docs_operations.parse_style({"blink": True})

        assert exc_info.value.code == ErrorCode.INVALID_PARAM_VALUE.value

    def test_font_size_must_be_a_number(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            docs_operations.parse_style({"font_size": "12"})

        assert exc_info.value.code == ErrorCode.INVALID_PARAM_VALUE.value
        assert "font_size must be a number" in exc_info.value.structured.message

    def test_bold_must_be_a_boolean(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            docs_operations.parse_style({"bold": "yes"})

        assert exc_info.value.code == ErrorCode.INVALID_PARAM_VALUE.value

    def test_bad_color(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            docs_operations.parse_style({"foreground_color": "chartreuse-ish"})

        assert exc_info.value.code == ErrorCode.INVALID_COLOR_FORMAT.value


class TestDocumentLifecycle:
    @pytest.mark.asyncio
    async def test_create_with_markdown(self, gateway):
        document_id = await docs_operations.create_document(gateway, "Plan", "# Hi")

        assert document_id == "new-doc"
        assert gateway.created == ["Plan"]
        assert gateway.batches == [
            [InsertText(1, "Hi"), SetTextStyle(1, 3, None), SetParagraphStyle(1, 3, "HEADING_1")]
        ]

    @pytest.mark.asyncio
    async def test_create_empty(self, gateway):
        await docs_operations.create_document(gateway, "Blank")

        assert gateway.batches == []

    @pytest.mark.asyncio
    async def test_update_appends_raw_text(self, gateway):
        await docs_operations.update_document(gateway, "doc-123", "\n**raw**")

        assert gateway.batches == [[InsertText(48, "\n**raw**")]]
        assert replay(gateway).endswith("Bye\n**raw**\n")

    @pytest.mark.asyncio
    async def test_update_replace_all(self, gateway):
        await docs_operations.update_document(gateway, "doc-123", "Fresh", replace_all=True)

        assert gateway.batches == [[DeleteRange(1, 48)], [InsertText(1, "Fresh")]]
        assert gateway.batch_revisions == ["rev-1", "rev-2"]
        assert replay(gateway) == "Fresh\n"

    @pytest.mark.asyncio
    async def test_delete_returns_title(self, gateway):
        title = await docs_operations.delete_document(gateway, "doc-123")

        assert title == "Test Doc"
        assert gateway.deleted == ["doc-123"]

    @pytest.mark.asyncio
    async def test_delete_missing_document(self, missing_gateway):
        with pytest.raises(NotFoundError):
            await docs_operations.delete_document(missing_gateway, "doc-123")

        assert missing_gateway.deleted == []

    @pytest.mark.asyncio
    async def test_search_passes_page_size(self, gateway):
        gateway.documents = [DocumentSummary("d1", "Plan")]

        results = await docs_operations.search_documents(gateway, "plan", 3)

        assert gateway.searches == [("plan", 3)]
        assert results[0].title == "Plan"


class TestTabsAndText:
    @pytest.mark.asyncio
    async def test_list_tabs(self, tabbed_gateway):
        tabs = await docs_operations.list_document_tabs(tabbed_gateway, "doc-123")

        assert [(t.tab_id, t.title) for t in tabs] == [("t.0", "Main"), ("t.1", "Notes")]

    @pytest.mark.asyncio
    async def test_body_text(self, gateway):
        target = await docs_operations.read_document_text(gateway, "doc-123")

        assert docs_operations.body_text(target) == SAMPLE_TEXT
        assert target.document_end == 48

    @pytest.mark.asyncio
    async def test_tab_text(self, tabbed_gateway):
        target = await docs_operations.read_document_text(tabbed_gateway, "doc-123", tab_id="t.1")

        assert target.tab_title == "Notes"
        assert docs_operations.body_text(target) == "Todo\nitem\n"
