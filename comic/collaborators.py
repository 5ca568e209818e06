"""Interfaces of the external services the comic workflow relies on.

Only thin default implementations live here: a placeholder summarizer and an
image store that inlines uploads as data URLs. Real deployments plug in a
hosted object store and database.
"""

import base64
import re
from abc import ABC, abstractmethod
from typing import Any

from common.models import DocumentSummary


class BaseDocumentSummarizer(ABC):
    @abstractmethod
    def summarize(self, file_name: str, data: bytes) -> DocumentSummary:
        pass


class BaseObjectStore(ABC):
    @abstractmethod
    def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``path`` and return its public URL.

        Raises:
            StorageError: If the upload fails.
        """
        pass


class BaseRecordStore(ABC):
    @abstractmethod
    def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert ``record`` into ``table`` and return the stored record.

        Raises:
            StorageError: If the insert fails.
        """
        pass


class MockDocumentSummarizer(BaseDocumentSummarizer):
    """Placeholder summarizer used until a real extraction backend is wired in."""

    ORDINALS = [
        "First", "Second", "Third", "Fourth", "Fifth",
        "Sixth", "Seventh", "Eighth", "Ninth", "Tenth",
    ]

    def summarize(self, file_name: str, data: bytes) -> DocumentSummary:
        text = data.decode("utf-8", errors="replace")
        paragraphs = len([block for block in re.split(r"\n\s*\n", text) if block.strip()])
        return DocumentSummary(
            summary=f"This is a summary of {file_name} with approximately {paragraphs} paragraphs.",
            key_points=[
                f"{ordinal} key takeaway from the document." for ordinal in self.ORDINALS
            ],
        )


class DataUrlObjectStore(BaseObjectStore):
    def put(self, path: str, data: bytes, content_type: str) -> str:
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{content_type};base64,{encoded}"
