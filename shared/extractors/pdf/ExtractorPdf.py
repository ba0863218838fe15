import asyncio
import threading

from shared.exceptions.RAGErrors import ExtractionFailedError
from shared.extractors.ExtractorInterface import ExtractorInterface
from shared.extractors.pdf.PdfStrategies import (
    PdfStrategy,
    extract_with_pdfplumber,
    extract_with_pymupdf,
    extract_with_pypdf,
)
from shared.helper.HelperConfig import HelperConfig


class ExtractorPdf(ExtractorInterface):
    """Runs the PDF strategies in order until one of them yields text."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.timeout = helper_config.get_float_val("EXTRACT_PDF_TIMEOUT", default=30.0)
        self.strategies: list[PdfStrategy] = [
            PdfStrategy("pypdf", extract_with_pypdf),
            PdfStrategy("pdfplumber", extract_with_pdfplumber, timeout=self.timeout),
            PdfStrategy("pymupdf", extract_with_pymupdf),
        ]

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_file_type(self) -> str:
        return "pdf"

    def get_supported_extensions(self) -> list[str]:
        return ["pdf"]

    ##########################################
    ############### EXTRACT ##################
    ##########################################

    async def _run_strategy(self, strategy: PdfStrategy, data: bytes, file_name: str) -> str:
        """
        Runs one strategy in a worker thread.

        Raises:
            TimeoutError: If the strategy exceeded its timeout. The worker is signalled to stop.
            Exception: Whatever the strategy raised.
        """
        cancel_token = threading.Event()
        worker = asyncio.to_thread(strategy.run, data, file_name, cancel_token)
        if strategy.timeout is None:
            return await worker
        try:
            return await asyncio.wait_for(worker, timeout=strategy.timeout)
        except asyncio.TimeoutError:
            cancel_token.set()
            raise TimeoutError(f"{strategy.name} parsing timeout after {strategy.timeout:g}s")

    async def _extract_text(self, data: bytes, file_name: str) -> str:
        last_error: Exception | None = None
        for position, strategy in enumerate(self.strategies):
            try:
                text = await self._run_strategy(strategy, data, file_name)
                self.logging.info("%s extracted %d characters from '%s'.", strategy.name, len(text), file_name)
                return text
            except Exception as e:
                last_error = e
                following = self.strategies[position + 1].name if position + 1 < len(self.strategies) else None
                if following:
                    self.logging.warning("%s failed for '%s', trying %s: %s", strategy.name, file_name, following, e)
                else:
                    self.logging.error("All PDF extraction methods failed for '%s'. Last error: %s", file_name, e)

        raise ExtractionFailedError(
            f"Failed to extract text from PDF. Tried {len(self.strategies)} different methods. "
            f"The PDF may be image-based, encrypted, or corrupted. Last error: {last_error}",
            details={"file_name": file_name},
        )
