"""
Free-text legal drafting features.

Thin prompt builders over the metered generator; their output is shown
as-is, so no parsing happens here.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..config.loader import ExtractionConfig
from ..sdk.base import ChunkSink
from . import prompts
from .metering import MeteredGenerator
from .word_counter import GenerationResult


@dataclass(frozen=True)
class MemoRequest:
    """Inputs of a legal memorandum. Facts and issue are required."""
    facts: str
    issue: str
    to: str = ""
    sender: str = ""
    subject: str = ""
    memo_date: Optional[date] = None

    def __post_init__(self):
        if not self.facts.strip():
            raise ValueError("facts are required and cannot be empty")
        if not self.issue.strip():
            raise ValueError("issue is required and cannot be empty")


class DraftingAssistant:
    def __init__(self, generator: MeteredGenerator, config: Optional[ExtractionConfig] = None):
        self.generator = generator
        self.config = config or ExtractionConfig()

    def draft_document(self, request: str) -> GenerationResult:
        """Draft a document section with Bluebook-style citations."""
        if not request.strip():
            raise ValueError("request is required and cannot be empty")
        return self.generator.generate(prompts.DRAFTING_PROMPT.format(request=request), "drafting")

    def write_legal_memo(self, memo: MemoRequest) -> GenerationResult:
        """Write a formal memorandum; blank header fields get placeholders."""
        prompt = prompts.LEGAL_MEMO_PROMPT.format(
            to=memo.to or "[Recipient Name]",
            sender=memo.sender or "[Your Name]",
            date=(memo.memo_date or date.today()).isoformat(),
            subject=memo.subject or "[Subject]",
            facts=prompts.truncate_context(memo.facts, self.config.context_char_budget),
            issue=memo.issue
        )
        return self.generator.generate(prompt, "legal-memo")

    def research(self, question: str) -> GenerationResult:
        return self.generator.generate(question, "research")

    def chat_with_document(
        self,
        document_text: str,
        file_name: str,
        question: str,
        on_chunk: ChunkSink
    ) -> GenerationResult:
        """Stream an answer to a question about an extracted document.

        Without document text the question is sent on its own.
        """
        if not question.strip():
            raise ValueError("question is required and cannot be empty")
        if document_text.strip():
            prompt = prompts.DOCUMENT_CHAT_PROMPT.format(
                file_name=file_name,
                document_text=prompts.truncate_context(document_text, self.config.document_char_budget),
                question=question
            )
        else:
            prompt = question
        return self.generator.stream(prompt, on_chunk, "chat-pdf")
