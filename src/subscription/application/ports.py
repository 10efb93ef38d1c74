"""
Outbound ports of the subscription application layer
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class EmailMessage:
    email: Optional[str]
    title: str
    message: str


@dataclass(frozen=True)
class StoredFile:
    bucket_name: str
    folder: str
    name: str
    file: bytes


class EmailService(Protocol):
    async def send(self, message: EmailMessage) -> None:
        ...


class FileStorage(Protocol):
    async def store_file(self, file: StoredFile) -> str:
        """Persist the file and return its public URL"""
        ...
