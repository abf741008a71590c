"""
Tests for free-text drafting features.
"""

from datetime import date

import pytest

from legosphere.config.loader import ExtractionConfig
from legosphere.core.drafting import DraftingAssistant, MemoRequest
from legosphere.core.prompts import TRUNCATION_MARKER, truncate_context

from conftest import StubProvider, make_generator


def _assistant(provider, config=None):
    generator, ledger = make_generator(provider=provider)
    return DraftingAssistant(generator, config), ledger


class TestTruncateContext:
    def test_short_text_unchanged(self):
        assert truncate_context("short", 10) == "short"

    def test_long_text_cut_and_marked(self):
        assert truncate_context("abcdefghij", 4) == "abcd" + TRUNCATION_MARKER

    def test_invalid_budget(self):
        with pytest.raises(ValueError):
            truncate_context("x", 0)


class TestMemo:
    def test_facts_and_issue_required(self):
        with pytest.raises(ValueError, match="facts"):
            MemoRequest(facts=" ", issue="Is the clause enforceable?")
        with pytest.raises(ValueError, match="issue"):
            MemoRequest(facts="Tenant left early.", issue="")

    def test_memo_prompt_and_feature(self):
        provider = StubProvider("MEMORANDUM body")
        assistant, ledger = _assistant(provider)

        result = assistant.write_legal_memo(MemoRequest(
            facts="Tenant left early.",
            issue="Is the tenant liable for remaining rent?",
            to="Senior Partner",
            memo_date=date(2024, 3, 15)
        ))

        prompt = provider.prompts[0]
        assert result.text == "MEMORANDUM body"
        assert "TO: Senior Partner" in prompt
        assert "FROM: [Your Name]" in prompt
        assert "SUBJECT: [Subject]" in prompt
        assert "DATE: 2024-03-15" in prompt
        assert "Is the tenant liable for remaining rent?" in prompt
        assert ledger._store.log == [("legal-memo", 2)]


class TestDraftAndResearch:
    def test_draft_document(self):
        provider = StubProvider("WHEREAS the parties")
        assistant, ledger = _assistant(provider)

        assistant.draft_document("Draft an NDA recital")

        assert "User Request: Draft an NDA recital" in provider.prompts[0]
        assert "Bluebook" in provider.prompts[0]
        assert ledger._store.log == [("drafting", 3)]

    def test_empty_draft_request_rejected(self):
        with pytest.raises(ValueError):
            _assistant(StubProvider())[0].draft_document("  ")

    def test_research_sends_question_verbatim(self):
        provider = StubProvider("Answer")
        assistant, ledger = _assistant(provider)
        assistant.research("What is promissory estoppel?")
        assert provider.prompts == ["What is promissory estoppel?"]
        assert ledger._store.log == [("research", 1)]


class TestChatWithDocument:
    def test_document_context_is_truncated(self):
        provider = StubProvider(chunks=["Clause ", "7 applies."])
        assistant, ledger = _assistant(provider, ExtractionConfig(document_char_budget=10))

        received = []
        result = assistant.chat_with_document("z" * 50, "lease.pdf", "Which clause?", received.append)

        prompt = provider.prompts[0]
        assert "Context from PDF document (lease.pdf)" in prompt
        assert "z" * 10 + TRUNCATION_MARKER in prompt
        assert prompt.endswith("User Question: Which clause?")
        assert received == ["Clause ", "7 applies."]
        assert result.text == "Clause 7 applies."
        assert ledger._store.log == [("chat-pdf", 3)]

    def test_without_document_sends_question_only(self):
        provider = StubProvider(chunks=["ok"])
        assistant, _ = _assistant(provider)
        assistant.chat_with_document("", "", "Hello?", lambda chunk: None)
        assert provider.prompts == ["Hello?"]
