from shared.exceptions.RAGErrors import ExtractionFailedError
from shared.extractors.ExtractorInterface import ExtractorInterface


class ExtractorText(ExtractorInterface):
    def get_file_type(self) -> str:
        return "txt"

    def get_supported_extensions(self) -> list[str]:
        return ["txt"]

    async def _extract_text(self, data: bytes, file_name: str) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionFailedError(
                f"Failed to process text file: {e}",
                details={"file_name": file_name},
            ) from e
