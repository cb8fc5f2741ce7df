"""Character-based sliding-window chunking for ingested documents."""

from shared.errors.exceptions import ValidationError
from shared.models.document import Chunk, Document


def validate_window(chunk_size: int, overlap: int) -> None:
    """Reject window settings that cannot make progress.

    Raises:
        ValidationError: If chunk_size is not positive, overlap is negative,
            or overlap is not smaller than chunk_size.
    """
    if chunk_size <= 0:
        raise ValidationError(f"chunk_size must be positive, got {chunk_size}.")
    if overlap < 0:
        raise ValidationError(f"overlap must not be negative, got {overlap}.")
    if overlap >= chunk_size:
        raise ValidationError(f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size}).")


def split_text(text: str, chunk_size: int, overlap: int) -> list[str]:
    """Split a document's text into overlapping chunks.

    The window starts at offset 0 and advances by chunk_size - overlap. It stops
    once a segment reaches the end of the text. Segments are verbatim slices of
    the input so citations can point back to the source.

    Args:
        text (str): The full document text.
        chunk_size (int): Maximum characters per chunk.
        overlap (int): Characters shared by consecutive chunks.

    Returns:
        list[str]: Ordered list of text chunks, empty for empty text.

    Raises:
        ValidationError: If the window settings are invalid.
    """
    validate_window(chunk_size, overlap)
    if not text:
        return []
    step = chunk_size - overlap
    chunks: list[str] = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        chunks.append(text[start:end])
        if end >= len(text):
            break
        start += step
    return chunks


def build_chunks(document: Document, chunk_size: int, overlap: int) -> list[Chunk]:
    """Derive the ordered Chunks of a document.

    Args:
        document (Document): The source document.
        chunk_size (int): Maximum characters per chunk.
        overlap (int): Characters shared by consecutive chunks.

    Returns:
        list[Chunk]: Chunks with dense, zero-based sequence indices.
    """
    source_metadata = {
        "title": document.title,
        "source": document.source,
        "published_at": document.published_at,
    }
    return [
        Chunk(
            document_id=document.id,
            sequence_index=index,
            text=segment,
            source_metadata=source_metadata,
        )
        for index, segment in enumerate(split_text(document.content, chunk_size, overlap))
    ]
