#!/usr/bin/env python3
"""
Documentation store for the support assistant.

Loads the documentation snippets from a JSON file once and keeps them in
memory until ``reload`` is called.
"""

import json
import threading
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from .config import Config
from ..schemas.documents import Document
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DocumentStore:
    """Ordered, in-memory list of documentation snippets."""

    def __init__(self, docs_path: Optional[str] = None):
        self.docs_path = docs_path or Config.DOCS_PATH
        self._documents: Optional[List[Document]] = None
        self._lock = threading.Lock()

    def get_documents(self) -> List[Document]:
        """Return the documentation, loading it on first use."""
        with self._lock:
            if self._documents is None:
                self._documents = self._load()
            return self._documents

    def reload(self) -> List[Document]:
        """Drop the loaded documentation and read the file again."""
        with self._lock:
            self._documents = self._load()
            return self._documents

    def _load(self) -> List[Document]:
        try:
            with open(self.docs_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading documentation from {self.docs_path}: {e}")
            return []

        # Support both a bare list and {"documentation": [...]}
        if isinstance(data, dict):
            data = data.get("documentation", data)
        if not isinstance(data, list):
            logger.error("Error loading documentation: documentation must be an array")
            return []

        documents = []
        for i, entry in enumerate(data):
            try:
                documents.append(Document.model_validate(entry))
            except PydanticValidationError as e:
                logger.warning(f"Skipping documentation entry {i}: {e.errors()[0]['msg']}")
        logger.info(f"Loaded {len(documents)} documentation entries from {self.docs_path}")
        return documents
