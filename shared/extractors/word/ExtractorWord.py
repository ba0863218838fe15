import asyncio
import io

from docx import Document

from shared.exceptions.RAGErrors import ExtractionFailedError
from shared.extractors.ExtractorInterface import ExtractorInterface


class ExtractorWord(ExtractorInterface):
    """Word documents through python-docx. Legacy binary .doc files are rejected by the reader."""

    def get_file_type(self) -> str:
        return "docx"

    def get_supported_extensions(self) -> list[str]:
        return ["docx", "doc"]

    @staticmethod
    def _read_docx(data: bytes) -> str:
        doc = Document(io.BytesIO(data))
        parts = [p.text for p in doc.paragraphs if p.text.strip()]

        # table cells are not part of doc.paragraphs
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))
        return "\n".join(parts)

    async def _extract_text(self, data: bytes, file_name: str) -> str:
        try:
            return await asyncio.to_thread(self._read_docx, data)
        except Exception as e:
            self.logging.error("Reading Word document '%s' failed: %s", file_name, e)
            raise ExtractionFailedError(
                f"Failed to process Word document: {e}",
                details={"file_name": file_name},
            ) from e
