"""
Unit Tests for Answer Generation
"""

import pytest
from unittest.mock import AsyncMock, Mock

from category_rag.core.query import AnswerGenerator, build_context, no_information_answer


class TestContextAssembly:
    def test_build_context_default_separator(self):
        assert build_context(["first", "second"]) == "first\n\nsecond"

    def test_build_context_category_separator(self):
        context = build_context(["[a.txt]\nalpha", "[b.txt]\nbeta"], "\n\n---\n\n")
        assert context == "[a.txt]\nalpha\n\n---\n\n[b.txt]\nbeta"

    def test_no_information_answer(self):
        assert no_information_answer("Legal Policy") == (
            "No relevant information found in Legal Policy documents to answer your question."
        )


class TestAnswerGenerator:
    """Test cases for AnswerGenerator with a mocked OpenAI client."""

    async def test_answer(self, answer_generator, mock_openai_client):
        answer = await answer_generator.answer("When is payment due?", "Payment within 30 days.")

        assert answer == "This is a sample AI response."
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.7
        prompt = kwargs["messages"][0]["content"]
        assert "Payment within 30 days." in prompt
        assert "User Question: When is payment due?" in prompt

    async def test_answer_for_category(self, answer_generator, mock_openai_client):
        await answer_generator.answer_for_category("Legal Policy", "Notice period?", "[a.txt]\n90 days")

        prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "Legal Policy policies and documents" in prompt
        assert "Use ONLY the provided content" in prompt
        assert "[a.txt]\n90 days" in prompt

    async def test_summarize(self, answer_generator, mock_openai_client):
        await answer_generator.summarize("Long content")

        prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert prompt.startswith("Please provide a clear and concise summary")
        assert "Long content" in prompt

    async def test_empty_completion(self):
        response = Mock()
        response.choices = [Mock()]
        response.choices[0].message.content = None
        client = Mock()
        client.chat.completions.create = AsyncMock(return_value=response)

        assert await AnswerGenerator(client=client).complete("prompt") == ""

    async def test_model_errors_propagate(self):
        client = Mock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))

        with pytest.raises(RuntimeError, match="rate limited"):
            await AnswerGenerator(client=client).answer("q", "c")
