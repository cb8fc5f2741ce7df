"""Prompt templates for the answering pipeline.

The assembled prompt is deterministic for a given query and match list:
context blocks appear in descending score order, ties by vector_id.
"""

from shared.clients.rag.models.Match import RetrievedMatch

NO_CONTEXT_MARKER = "[NO RELEVANT CONTEXT FOUND]"

RAG_PROMPT_TEMPLATE = """Answer the question using the news excerpts below.
Cite the article titles you rely on. If the excerpts do not answer the question, say so.

Context:
{context}

Question: {query}

Answer:"""

CONTEXT_BLOCK_TEMPLATE = "[{position}] {title} ({source}, {published_at})\n{text}"


def order_matches(matches: list[RetrievedMatch]) -> list[RetrievedMatch]:
    """Sort matches by descending score, ties broken by vector_id."""
    return sorted(matches, key=lambda m: (-m.score, m.vector_id))


def build_prompt(query: str, matches: list[RetrievedMatch]) -> str:
    """Assemble the generation prompt from the query and retrieved chunks.

    Zero matches yields an explicit NO_CONTEXT_MARKER instead of any context.
    """
    if not matches:
        context = NO_CONTEXT_MARKER
    else:
        context = "\n\n".join(
            CONTEXT_BLOCK_TEMPLATE.format(
                position=position,
                title=match.payload.title,
                source=match.payload.source,
                published_at=match.payload.published_at,
                text=match.payload.chunk_text,
            )
            for position, match in enumerate(order_matches(matches), start=1)
        )
    return RAG_PROMPT_TEMPLATE.format(context=context, query=query.strip())
