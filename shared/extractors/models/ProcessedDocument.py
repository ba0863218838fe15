from pydantic import BaseModel


class ProcessedDocument(BaseModel):
    """Plain text extracted from an uploaded file. Never persisted.

    Attributes:
        text (str): The extracted text, trimmed.
        file_name (str): Name of the uploaded file.
        file_type (str): Normalised type tag ("pdf", "docx", "txt").
    """

    text: str
    file_name: str
    file_type: str
