import os

from shared.exceptions.RAGErrors import UnsupportedFormatError
from shared.extractors.ExtractorInterface import ExtractorInterface
from shared.extractors.models.ProcessedDocument import ProcessedDocument
from shared.helper.HelperConfig import HelperConfig

# <name> resolves to shared.extractors.<name lowercase>.Extractor<name>
REGISTERED_EXTRACTORS = ["Pdf", "Word", "Text"]


class ExtractorManager:
    """
    Manager class mapping file extensions to their extractor.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.extractors = self._initialize_extractors()

    def _initialize_extractors(self) -> dict[str, ExtractorInterface]:
        """
        Instantiates all registered extractors and indexes them by extension.

        Returns:
            dict[str, ExtractorInterface]: Lowercase extension -> extractor.

        Raises:
            ValueError: If a registered extractor cannot be imported.
        """
        by_extension: dict[str, ExtractorInterface] = {}
        for name in REGISTERED_EXTRACTORS:
            className = f"Extractor{name}"
            try:
                module = __import__(
                    f"shared.extractors.{name.lower()}.{className}",
                    fromlist=[className],
                )
                extractor = getattr(module, className)(helper_config=self.helper_config)
            except (ImportError, AttributeError) as e:
                raise ValueError(f"Could not load extractor '{name}'. Error: {e}")
            for extension in extractor.get_supported_extensions():
                by_extension[extension] = extractor
            self.logging.debug(f"Registered extractor {className} for {extractor.get_supported_extensions()}")
        return by_extension

    @staticmethod
    def get_extension(file_name: str) -> str:
        """Returns the lowercase extension of a file name without the dot ("" if there is none)."""
        return os.path.splitext(file_name)[1].lstrip(".").lower()

    def get_extractor(self, file_name: str) -> ExtractorInterface:
        """
        Returns the extractor responsible for a file name.

        Raises:
            UnsupportedFormatError: If no extractor handles the extension.
        """
        extension = self.get_extension(file_name)
        extractor = self.extractors.get(extension)
        if extractor is None:
            raise UnsupportedFormatError(extension)
        return extractor

    def get_supported_extensions(self) -> list[str]:
        return sorted(self.extractors)

    async def do_extract(self, data: bytes, file_name: str) -> ProcessedDocument:
        """
        Extracts the text of a file with the extractor for its extension.

        Raises:
            UnsupportedFormatError: If the extension is not supported.
            ExtractionFailedError: If the extractor could not read the file.
        """
        return await self.get_extractor(file_name).do_extract(data, file_name)
