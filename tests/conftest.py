"""
Pytest configuration for the annotator tests.

Adds the project root to sys.path so that `import services` and friends work
from within the tests/ directory without an installed package, and provides an
in-memory document backend for the session tests.
"""
import asyncio
import os
import sys
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.document_backend import DocumentBackend  # noqa: E402
from services.errors import DocumentLoadError, SaveError  # noqa: E402


class FakeBackend(DocumentBackend):
    """Documents live in dictionaries; every call is recorded."""

    def __init__(self) -> None:
        self.pages: Dict[str, List[str]] = {}
        self.annotations: Dict[str, list] = {}
        self.saved: Dict[str, list] = {}
        self.save_calls: List[tuple] = []
        self.startup_file: Optional[str] = None
        self.fail_save = False
        self.fail_annotations = False
        self.failing_pages: set = set()
        self.open_delays: Dict[str, asyncio.Event] = {}

    def add_document(self, path: str, page_texts: List[str], annotations: Optional[list] = None) -> None:
        self.pages[path] = list(page_texts)
        if annotations is not None:
            self.annotations[path] = annotations

    async def get_startup_file(self) -> Optional[str]:
        return self.startup_file

    async def open_document(self, path: str) -> int:
        gate = self.open_delays.get(path)
        if gate is not None:
            await gate.wait()
        if path not in self.pages:
            raise DocumentLoadError(f"cannot open {path}")
        return len(self.pages[path])

    async def load_annotations(self, path: str) -> list:
        if self.fail_annotations or path not in self.annotations:
            raise FileNotFoundError(path)
        return list(self.annotations[path])

    async def save_document_with_annotations(self, path, records, source_path=None) -> None:
        self.save_calls.append((path, list(records), source_path))
        if self.fail_save:
            raise SaveError("disk full")
        self.saved[path] = list(records)

    async def get_page_text(self, path: str, page_index: int) -> str:
        if page_index in self.failing_pages:
            raise RuntimeError(f"no text for page {page_index}")
        return self.pages[path][page_index]

    async def render_page(self, path: str, page_index: int, scale: float) -> bytes:
        return b""


class ConfirmRecorder:
    """Async confirmation gate that answers with a preset value and records each prompt."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.messages: List[str] = []

    async def __call__(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


class NoticeRecorder:
    def __init__(self) -> None:
        self.notices: List[tuple] = []

    def __call__(self, level: str, message: str) -> None:
        self.notices.append((level, message))

    @property
    def levels(self) -> List[str]:
        return [level for level, _ in self.notices]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def confirm() -> ConfirmRecorder:
    return ConfirmRecorder()


@pytest.fixture
def notices() -> NoticeRecorder:
    return NoticeRecorder()
