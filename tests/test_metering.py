"""
Tests for metered generation.
"""

import pytest

from legosphere.core.errors import ProviderError
from legosphere.core.word_counter import GenerationResult, count_words
from legosphere.sdk.mock_client import MockProvider

from conftest import StubProvider, StubProxy, make_generator


class TestCountWords:
    def test_whitespace_tokenization(self):
        assert count_words("one two  three\nfour\tfive") == 5
        assert count_words("  padded  ") == 1

    def test_blank_text_is_zero(self):
        assert count_words("") == 0
        assert count_words(" \n ") == 0

    def test_result_word_count(self):
        assert GenerationResult(text="The court held that").word_count == 4


class TestMeteredGenerate:
    def test_deducts_word_count_with_feature(self):
        generator, ledger = make_generator(provider=StubProvider("four words right here"))

        result = generator.generate("p", "drafting")

        assert result.word_count == 4
        assert ledger.state.used_units == 4
        assert ledger._store.log == [("drafting", 4)]

    def test_proxy_text_is_also_metered_locally(self):
        generator, ledger = make_generator(proxy=StubProxy("two words"))
        generator.generate("p")
        assert ledger.state.used_units == 2

    def test_failure_deducts_nothing(self):
        generator, ledger = make_generator(provider=StubProvider(fail=True), proxy=StubProxy(fail=True))
        with pytest.raises(ProviderError):
            generator.generate("p")
        assert ledger.state.used_units == 0

    def test_empty_feature_rejected(self):
        generator, _ = make_generator()
        with pytest.raises(ValueError, match="feature"):
            generator.generate("p", "")


class TestMeteredStream:
    def test_chunks_forwarded_and_accumulated(self):
        generator, ledger = make_generator(provider=StubProvider(chunks=["The co", "urt ", "held."]))

        received = []
        result = generator.stream("p", received.append)

        assert received == ["The co", "urt ", "held."]
        assert result.text == "The court held."
        assert ledger.state.used_units == 3
        assert ledger._store.log == [("chat-pdf", 3)]

    def test_partial_stream_is_charged_and_preserved(self):
        provider = StubProvider(chunks=["one two ", "three ", "four"], fail_after=2)
        generator, ledger = make_generator(provider=provider)

        received = []
        with pytest.raises(ProviderError) as excinfo:
            generator.stream("p", received.append)

        assert received == ["one two ", "three "]
        assert excinfo.value.partial_text == "one two three "
        assert ledger.state.used_units == 3

    def test_sink_error_still_charges_delivered_words(self):
        provider = StubProvider(chunks=["one two ", "three ", "four"])
        generator, ledger = make_generator(provider=provider)

        def on_chunk(chunk):
            if chunk == "three ":
                raise RuntimeError("display closed")

        with pytest.raises(RuntimeError, match="display closed"):
            generator.stream("p", on_chunk, "chat-pdf")

        assert ledger.state.used_units == 3
        assert ledger._store.log == [("chat-pdf", 3)]

    def test_stream_failure_before_any_chunk(self):
        generator, ledger = make_generator(provider=StubProvider(fail=True))
        with pytest.raises(ProviderError) as excinfo:
            generator.stream("p", lambda chunk: None)
        assert excinfo.value.partial_text == ""
        assert ledger.state.used_units == 0

    def test_mock_stream_charges_same_as_generate(self):
        provider = MockProvider(chunk_size=10, sleep=lambda _: None)
        generator, ledger = make_generator(provider=provider)

        streamed = generator.stream("Summarize", lambda chunk: None)
        one_shot = generator.generate("Summarize")

        assert streamed.text == one_shot.text
        assert ledger.state.used_units == 2 * one_shot.word_count
