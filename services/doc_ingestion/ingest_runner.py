"""Ingestion runner entry point.

Ingests local files for one owner, the same way the upload route does.

Usage:
    python -m services.doc_ingestion.ingest_runner --owner <owner_id> [--clear] FILE [FILE ...]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.exceptions.RAGErrors import RAGAssistantError
from shared.extractors.ExtractorManager import ExtractorManager
from services.doc_ingestion.IngestionService import IngestionService
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest local documents into the vector store for one owner.")
    parser.add_argument("--owner", required=True, help="Owner id the documents belong to.")
    parser.add_argument("--clear", action="store_true", help="Delete all documents of the owner before ingesting.")
    parser.add_argument("files", nargs="+", type=Path, help="Files to ingest (pdf, docx, txt).")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Run the ingestion and return the process exit code."""
    args = parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    embed_client = EmbedClientManager(helper_config=config).get_client()
    rag_client = RAGClientManager(helper_config=config).get_client()

    try:
        # both clients are required, there is no point in ingesting without either
        try:
            await embed_client.boot()
            await rag_client.boot()
            await rag_client.do_healthcheck()
        except Exception as e:
            logger.error(f"Error booting clients: {e}. Aborting.")
            return 2

        service = IngestionService(
            helper_config=config,
            extractor_manager=ExtractorManager(helper_config=config),
            embed_client=embed_client,
            rag_client=rag_client,
        )

        if args.clear:
            try:
                await rag_client.do_clear(args.owner)
            except RAGAssistantError as e:
                logger.error(f"Error clearing documents of {args.owner}: {e}. Aborting.")
                return 2

        failed = 0
        for path in args.files:
            try:
                result = await service.do_ingest(path.read_bytes(), path.name, args.owner)
                logger.info(
                    f"{path.name}: {result.chunks_processed} chunks stored ({result.file_type}).",
                    color="green",
                )
            except (RAGAssistantError, OSError) as e:
                failed += 1
                logger.error(f"{path.name}: {e}")

        logger.info(f"Ingested {len(args.files) - failed}/{len(args.files)} files for owner {args.owner}.")
        return 1 if failed else 0
    finally:
        await embed_client.close()
        await rag_client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
