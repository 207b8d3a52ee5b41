#!/usr/bin/env python3
"""
Storage backends used by the version ledger and reference synchronizer
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


class Storage(ABC):
    """Minimal async text storage"""

    @abstractmethod
    async def read_file(self, path: PathLike) -> str:
        """Return the full text of ``path``"""
        pass

    @abstractmethod
    async def write_file(self, path: PathLike, data: str) -> None:
        """Replace the contents of ``path`` with ``data``"""
        pass

    @abstractmethod
    async def file_exists(self, path: PathLike) -> bool:
        pass


class FileSystemStorage(Storage):
    """UTF-8 files on the local file system.

    Blocking calls run in a worker thread so several files can be processed
    concurrently from one event loop. Errors from the OS propagate as-is.
    """

    async def read_file(self, path: PathLike) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding='utf-8')

    async def write_file(self, path: PathLike, data: str) -> None:
        await asyncio.to_thread(Path(path).write_text, data, encoding='utf-8')

    async def file_exists(self, path: PathLike) -> bool:
        return await asyncio.to_thread(Path(path).is_file)
