"""
Answer Generation - Prompt templates and the LLM call

Retrieved chunks are joined into a context block and handed to the model
unmodified.

License: MIT
"""

from typing import Sequence
import logging

from ..infrastructure.monitoring import llm_generation_duration_tracker

logger = logging.getLogger(__name__)

QA_TEMPLATE = """You are a helpful assistant that answers questions about the following content.
Use the provided content to answer the user's question accurately and concisely.

Content:
{context}

User Question: {question}

Answer: """

CATEGORY_QA_TEMPLATE = """You are a helpful assistant specialized in answering questions about {category} policies and documents.
Use ONLY the provided content to answer the user's question accurately and concisely.
If the answer is not in the provided content, say so clearly.

Content:
{context}

User Question: {question}

Answer: """

SUMMARY_TEMPLATE = """Please provide a clear and concise summary of the following content.
Highlight the main points and key information.

Content:
{content}

Summary: """


def build_context(chunks: Sequence[str], separator: str = "\n\n") -> str:
    """Join retrieved chunks with a separator."""
    return separator.join(chunks)


def no_information_answer(category: str) -> str:
    """Answer returned when a category search finds nothing."""
    return f"No relevant information found in {category} documents to answer your question."


class AnswerGenerator:
    """
    Generates answers with an OpenAI chat model.

    Errors from the model call propagate to the caller.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        client=None,
        timeout: float = 60.0,
        max_retries: int = 3,
    ):
        """
        Initialize the answer generator.

        Args:
            model: Chat model name
            temperature: Sampling temperature
            max_tokens: Completion token limit
            client: Optional pre-built AsyncOpenAI client
            timeout: Request timeout in seconds
            max_retries: Client-level retry count
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the async OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(timeout=self.timeout, max_retries=self.max_retries)
        return self._client

    async def complete(self, prompt: str) -> str:
        """Send one prompt and return the model's text."""
        with llm_generation_duration_tracker(self.model):
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )

        return (response.choices[0].message.content or "").strip()

    async def answer(self, question: str, context: str) -> str:
        """Answer a question about loaded content."""
        return await self.complete(QA_TEMPLATE.format(context=context, question=question))

    async def answer_for_category(self, category: str, question: str, context: str) -> str:
        """Answer a question using only content from one category."""
        prompt = CATEGORY_QA_TEMPLATE.format(category=category, context=context, question=question)
        return await self.complete(prompt)

    async def summarize(self, content: str) -> str:
        """Summarize content."""
        return await self.complete(SUMMARY_TEMPLATE.format(content=content))
