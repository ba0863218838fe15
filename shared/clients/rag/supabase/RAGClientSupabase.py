import json

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.DocumentChunk import DocumentChunk
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientSupabase(RAGClientInterface):
    """Supabase (Postgres + pgvector) engine, spoken to through its PostgREST interface.

    Table layout and the match function are created by schema.sql next to this file.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._table = self.get_config_val("TABLE", default="document_chunks", val_type="string")
        self._match_function = self.get_config_val("MATCH_FUNCTION", default="match_documents", val_type="string")
        self._use_match_function = self.get_config_val("USE_MATCH_FUNCTION", default=True, val_type="bool")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Supabase"

    def supports_server_side_search(self) -> bool:
        return self._use_match_function

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="TABLE", val_type="string", default="document_chunks"),
            EnvConfig(env_key="MATCH_FUNCTION", val_type="string", default="match_documents"),
            EnvConfig(env_key="USE_MATCH_FUNCTION", val_type="bool", default=True),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        # a zero-row read proves both reachability and table access
        return f"/rest/v1/{self._table}?select=id&limit=1"

    def _get_endpoint_table(self) -> str:
        return f"/rest/v1/{self._table}"

    def _get_endpoint_match(self) -> str:
        return f"/rest/v1/rpc/{self._match_function}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_match_payload(self, query_embedding: list[float], top_k: int, owner_id: str) -> dict:
        return {
            "query_embedding": query_embedding,
            "match_threshold": self.similarity_threshold,
            "match_count": top_k,
            "owner_id": owner_id,
        }

    def get_owner_filter(self, owner_id: str) -> dict:
        return {"owner_id": f"eq.{owner_id}"}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def _row_to_chunk(self, row: dict) -> DocumentChunk:
        """Convert a PostgREST row. pgvector columns are serialised as JSON text."""
        if isinstance(row.get("embedding"), str):
            row = {**row, "embedding": json.loads(row["embedding"])}
        return DocumentChunk.from_row(row, similarity=row.get("similarity"))

    @staticmethod
    def _parse_content_range(header: str | None) -> int:
        """Extract the total from a Content-Range header like "0-24/3573" or "*/0"."""
        if not header or "/" not in header:
            raise ValueError(f"Missing or malformed Content-Range header: '{header}'")
        total = header.rsplit("/", 1)[1].strip()
        if total == "*":
            raise ValueError("Backend did not report an exact count.")
        return int(total)

    ##########################################
    ########### STORAGE PRIMITIVES ###########
    ##########################################

    async def _insert_chunk(self, chunk: DocumentChunk) -> None:
        await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_table(),
            json=chunk.to_row(),
            additional_headers={"Prefer": "return=minimal"},
            raise_on_error=True,
        )

    async def _fetch_chunks(self, owner_id: str, limit: int | None = None) -> list[DocumentChunk]:
        params = {"select": "*", **self.get_owner_filter(owner_id), "order": "created_at.desc"}
        if limit is not None:
            params["limit"] = str(limit)
        response = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_table(),
            params=params,
            raise_on_error=True,
        )
        return [self._row_to_chunk(row) for row in response.json()]

    async def _delete_owner_chunks(self, owner_id: str) -> None:
        await self.do_request(
            method="DELETE",
            endpoint=self._get_endpoint_table(),
            params=self.get_owner_filter(owner_id),
            additional_headers={"Prefer": "return=minimal"},
            raise_on_error=True,
        )

    async def _count_owner_chunks(self, owner_id: str) -> int:
        response = await self.do_request(
            method="HEAD",
            endpoint=self._get_endpoint_table(),
            params={"select": "id", **self.get_owner_filter(owner_id)},
            additional_headers={"Prefer": "count=exact"},
            raise_on_error=True,
        )
        return self._parse_content_range(response.headers.get("content-range"))

    async def _search_server_side(self, query_embedding: list[float], top_k: int, owner_id: str) -> list[DocumentChunk]:
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_match(),
            json=self.get_match_payload(query_embedding, top_k, owner_id),
            raise_on_error=True,
        )
        rows = response.json()
        if not isinstance(rows, list):
            raise ValueError(f"Unexpected response from {self._match_function}: {type(rows).__name__}")
        self.logging.debug("%s returned %d rows for owner %s.", self._match_function, len(rows), owner_id)
        return [self._row_to_chunk(row) for row in rows]
