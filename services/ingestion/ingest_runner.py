"""Ingest runner entry point.

Ingests a JSON file of news articles into the vector index without starting
the API. The file holds either a list of articles or {"articles": [...]}.

Usage:
    python -m services.ingestion.ingest_runner articles.json
"""

import asyncio
import json
import sys

from pydantic import TypeAdapter

from services.ingestion.IngestionService import IngestionService
from shared.clients.ClientBundle import ClientBundle
from shared.errors.exceptions import ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.document import Document
from shared.models.ingest import IngestResult

_documents_adapter = TypeAdapter(list[Document])


def load_documents(path: str) -> list[Document]:
    """Read and validate the articles of a JSON file.

    Raises:
        ValidationError: If the file is not valid JSON or an article is malformed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"{path} is not valid JSON: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("articles", [])
    try:
        return _documents_adapter.validate_python(raw)
    except ValueError as e:
        raise ValidationError(f"{path} contains malformed articles: {e}") from e


async def main(path: str) -> IngestResult:
    """Boot the embed and rag clients, ingest the file and log the report."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    documents = load_documents(path)

    clients = ClientBundle.from_config(helper_config=config, with_chat=False)
    try:
        await clients.boot(logger)
        service = IngestionService(
            helper_config=config,
            rag_client=clients.rag_client,
            embed_client=clients.embed_client,
        )
        result = await service.do_ingest(documents)
    finally:
        await clients.close()

    logger.info(
        "Ingest finished: %d ingested, %d failed.",
        result.ingested_count, result.failed_count,
        color="green" if not result.failed_count else "yellow",
    )
    for failure in result.failures:
        logger.warning("  %s: %s", failure.document_id, failure.reason)
    return result


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m services.ingestion.ingest_runner <articles.json>", file=sys.stderr)
        sys.exit(2)
    report = asyncio.run(main(sys.argv[1]))
    print(report.model_dump_json(indent=2))
    sys.exit(1 if report.failed_count else 0)
