"""
Infrastructure Layer - Local JSON Document

Single-file persistence for the whole annotation document.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Any, Iterable

from annotator_app.shared.exceptions import BackendIOError

logger = logging.getLogger(__name__)


class LocalJsonDocument:
    """
    One JSON file holding every collection under its own top-level key.

    A missing file reads as an empty document; writes go through a temp file
    and an atomic rename so readers never observe a half-written document.
    """

    def __init__(self, path: Path, collections: Iterable[str] = ()):
        self.path = Path(path)
        self.collections = tuple(collections)

    def _empty(self) -> Dict[str, Any]:
        return {name: [] for name in self.collections}

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"Document not found, starting empty: {self.path}")
            return self._empty()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in document {self.path}: {e}")
            raise BackendIOError(
                f"Document {self.path.name} is not valid JSON",
                backend="local", operation="load", cause=e
            )
        except OSError as e:
            logger.error(f"Failed to read document {self.path}: {e}")
            raise BackendIOError(
                f"Failed to read document {self.path.name}",
                backend="local", operation="load", cause=e
            )

        if not isinstance(data, dict):
            raise BackendIOError(
                f"Document {self.path.name} must contain a JSON object",
                backend="local", operation="load"
            )

        document = self._empty()
        document.update(data)
        return document

    def save(self, document: Dict[str, Any]):
        temp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)

            # Atomic rename to final location
            temp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write document {self.path}: {e}")
            temp_path.unlink(missing_ok=True)
            raise BackendIOError(
                f"Failed to write document {self.path.name}",
                backend="local", operation="save", cause=e
            )

        logger.debug(f"Saved document: {self.path}")
