"""GPT-powered answer generation grounded in retrieved transcript excerpts."""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from video_qa.config import settings
from video_qa.errors import EmptyContextError, ProviderError
from video_qa.openai_client import get_openai_client, translate_errors
from video_qa.retrieval.search import SimilarityResult

INSUFFICIENT_CONTEXT_ANSWER = (
    "I don't have enough information from this video's transcript to answer that question."
)

_PROMPT_TEMPLATE = """\
Here are the most relevant excerpts from a video transcript:

{context}

Based ONLY on the information provided above, please answer the following question:
{question}

Instructions:
- Use only the information from the excerpts above
- If the excerpts don't contain enough information to answer the question, say so
- Be concise but thorough
- Reference specific points from the excerpts when possible

Answer:"""


def build_prompt(question: str, results: Sequence[SimilarityResult]) -> str:
    """Format ranked excerpts and the question into a single grounded prompt."""
    context = "\n\n".join(
        f'Excerpt {rank} (relevance: {result.similarity * 100:.1f}%):\n"{result.text}"'
        for rank, result in enumerate(results, start=1)
    )
    return _PROMPT_TEMPLATE.format(context=context, question=question)


def generate_answer(
    question: str,
    results: Sequence[SimilarityResult],
    api_key: str,
    *,
    model: str | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
    top_p: float | None = None,
    http_client: httpx.Client | None = None,
) -> str:
    """Generate an answer using only the supplied excerpts.

    Low temperature keeps the output focused and factual.

    Args:
        question: The user's question.
        results: Ranked excerpts, best first.
        api_key: Caller-supplied OpenAI credential.
        model, max_tokens, temperature, top_p: Override settings defaults.
        http_client: Optional pre-configured httpx client.

    Returns:
        The trimmed answer text.

    Raises:
        EmptyContextError: If *results* is empty (no request is made).
        AuthError, RateLimitError, NetworkError, ProviderError
    """
    if not results:
        raise EmptyContextError("No transcript excerpts to answer from")

    client = get_openai_client(api_key, http_client=http_client)
    with translate_errors("Answer generation"):
        response = client.chat.completions.create(
            model=model or settings.llm_model,
            messages=[{"role": "user", "content": build_prompt(question, results)}],
            max_tokens=max_tokens if max_tokens is not None else settings.answer_max_tokens,
            temperature=temperature if temperature is not None else settings.answer_temperature,
            top_p=top_p if top_p is not None else settings.answer_top_p,
        )

    if not response.choices or response.choices[0].message.content is None:
        raise ProviderError("Completion response contained no answer")
    return response.choices[0].message.content.strip()
