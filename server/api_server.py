"""FastAPI application entry point for the document RAG assistant."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.exceptions.RAGErrors import RAGAssistantError
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.extractors.ExtractorManager import ExtractorManager
from services.doc_ingestion.IngestionService import IngestionService
from server.core.AnswerService import AnswerService
from server.core.DocumentService import DocumentService
from server.models.responses import HealthResponse
from server.routers.UploadRouter import router as upload_router
from server.routers.ChatRouter import router as chat_router
from server.routers.DocumentsRouter import router as documents_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    # fail fast when the shared secret is missing
    app.state.helper_config.get_string_val("APP_API_KEY")

    embed_client = EmbedClientManager(helper_config=app.state.helper_config).get_client()
    rag_client = RAGClientManager(helper_config=app.state.helper_config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.helper_config).get_client()

    logging.info("Booting all clients...")
    for client in [embed_client, rag_client, llm_client]:
        await client.boot()
    logging.info("All clients booted successfully.")

    app.state.embed_client = embed_client
    app.state.rag_client = rag_client
    app.state.llm_client = llm_client

    app.state.ingestion_service = IngestionService(
        helper_config=app.state.helper_config,
        extractor_manager=ExtractorManager(helper_config=app.state.helper_config),
        embed_client=embed_client,
        rag_client=rag_client,
    )
    app.state.answer_service = AnswerService(
        helper_config=app.state.helper_config,
        embed_client=embed_client,
        rag_client=rag_client,
        llm_client=llm_client,
    )
    app.state.document_service = DocumentService(
        helper_config=app.state.helper_config,
        rag_client=rag_client,
    )

    await check_connections(embed_client, rag_client, llm_client)

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in [embed_client, rag_client, llm_client]:
        await client.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="rag_assistant",
    description=(
        "Retrieval-augmented question answering over uploaded business documents. "
        "Documents (PDF, Word, text) are uploaded via POST /upload, split into chunks, "
        "embedded and stored per owner. Questions are answered via POST /chat."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router)
app.include_router(chat_router)
app.include_router(documents_router)


##########################################
############ ERROR HANDLERS ##############
##########################################

@app.exception_handler(RAGAssistantError)
async def handle_rag_error(request: Request, exc: RAGAssistantError) -> JSONResponse:
    status_code = exc.http_status
    if status_code >= 500:
        logging.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logging.warning("%s %s rejected (%d): %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg", "")} for e in exc.errors()]
    logging.warning("%s %s rejected (400): invalid request %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": {"errors": errors}})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logging.exception("Unexpected error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


##########################################
################ ROUTES ##################
##########################################

@app.get("/health", tags=["health"])
async def health() -> HealthResponse:
    return HealthResponse(status="ok", version=app_version)


async def check_connections(
    embed_client: EmbedClientInterface,
    rag_client: RAGClientInterface,
    llm_client: LLMClientInterface,
) -> None:
    """Check connectivity to all configured backends on startup.

    Embedding failures are non-fatal (uploads and chat will fail later, but the server stays up).
    Store and completion failures are fatal.

    Raises:
        Exception: If the store or the completion model is not reachable.
    """
    result: httpx.Response = await embed_client.do_healthcheck()
    if not result.is_success:
        logging.warning(
            "Embed client '%s' is not reachable (status %d). Uploads and chat may fail.",
            embed_client.__class__.__name__,
            result.status_code,
        )

    result = await rag_client.do_healthcheck()
    if not result.is_success:
        raise Exception(
            f"RAG client '{rag_client.__class__.__name__}' is not reachable "
            f"(status {result.status_code}). Cannot store or search documents."
        )

    result = await llm_client.do_healthcheck()
    if not result.is_success:
        raise Exception(
            f"LLM client is not reachable (status {result.status_code}). "
            "Chat will not work."
        )


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting rag_assistant API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
