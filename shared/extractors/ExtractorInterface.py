from abc import ABC, abstractmethod

from shared.extractors.models.ProcessedDocument import ProcessedDocument
from shared.helper.HelperConfig import HelperConfig


class ExtractorInterface(ABC):
    """Turns the raw bytes of one file format into plain text."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config

    ##########################################
    ################ GETTER ##################
    ##########################################

    @abstractmethod
    def get_file_type(self) -> str:
        """
        Returns the normalised file type tag reported for extracted documents. E.g. "pdf"
        """
        pass

    @abstractmethod
    def get_supported_extensions(self) -> list[str]:
        """
        Returns the lowercase file extensions (without dot) handled by this extractor. E.g. ["docx", "doc"]
        """
        pass

    ##########################################
    ############### EXTRACT ##################
    ##########################################

    @abstractmethod
    async def _extract_text(self, data: bytes, file_name: str) -> str:
        """
        Extracts the text from the raw file content.

        Raises:
            ExtractionFailedError: If the file cannot be read.
        """
        pass

    async def do_extract(self, data: bytes, file_name: str) -> ProcessedDocument:
        """
        Extracts the text of a file.

        Args:
            data (bytes): The raw file content.
            file_name (str): The name of the uploaded file.

        Returns:
            ProcessedDocument: The extracted text together with file name and type.

        Raises:
            ExtractionFailedError: If the file cannot be read.
        """
        text = await self._extract_text(data, file_name)
        self.logging.debug("Extracted %d characters from '%s' as %s.", len(text), file_name, self.get_file_type())
        return ProcessedDocument(text=text, file_name=file_name, file_type=self.get_file_type())
