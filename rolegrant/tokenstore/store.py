"""
File-backed token store for rolegrant.

This module provides the store shared by every caller of the lifecycle
manager: an in-memory mapping from token identifier to TokenRecord,
guarded by a single read/write lock and mirrored to a JSON file on
every mutation.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Optional, Union

import aiofiles
import aiofiles.os

from ..core.types import TokenId, TokenRecord
from ..errors import StoreExistsError, StoreFormatError, StoreIOError
from .codec import decode_tokens, encode_tokens
from .lock import ReadWriteLock


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class TokenStore:
    """
    Write-through token store.

    Every successful write rewrites the whole file (temp file + rename)
    before returning. When persisting fails the in-memory mapping keeps
    the attempted state and StoreIOError is raised.

    Use TokenStore.load() at startup and TokenStore.initialize() only for
    first-run setup; neither falls back to the other.
    """

    def __init__(self, path: PathLike, tokens: Optional[Dict[TokenId, TokenRecord]] = None):
        self.path = Path(path)
        self._tokens: Dict[TokenId, TokenRecord] = dict(tokens or {})
        self._lock = ReadWriteLock()

    @classmethod
    async def load(cls, path: PathLike) -> "TokenStore":
        """
        Load the store from an existing file.

        Raises:
            StoreIOError: If the file is missing or cannot be read
            StoreFormatError: If the file content is malformed
        """
        path = Path(path)
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                text = await f.read()
        except FileNotFoundError as e:
            raise StoreIOError(f"Token store not found: {path}", path=str(path), cause=e)
        except UnicodeDecodeError as e:
            raise StoreFormatError(f"Token store {path} is not UTF-8 text", path=str(path), cause=e)
        except OSError as e:
            raise StoreIOError(f"Failed to read {path}: {e}", path=str(path), cause=e)

        tokens = decode_tokens(text, str(path))
        logger.info(f"Loaded token store {path} ({len(tokens)} tokens)")
        return cls(path, tokens)

    @classmethod
    async def initialize(cls, path: PathLike) -> "TokenStore":
        """
        Create a new, empty store file.

        Raises:
            StoreExistsError: If something already exists at path
            StoreIOError: If the file cannot be created
        """
        path = Path(path)
        store = cls(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, 'x', encoding='utf-8') as f:
                await f.write(encode_tokens(store._tokens))
            os.chmod(path, 0o600)
        except FileExistsError as e:
            raise StoreExistsError(f"Token store already exists: {path}", path=str(path), cause=e)
        except OSError as e:
            raise StoreIOError(f"Failed to create {path}: {e}", path=str(path), cause=e)

        logger.info(f"Created new token store: {path}")
        return store

    def __len__(self) -> int:
        return len(self._tokens)

    async def read(self, token_id: TokenId) -> Optional[TokenRecord]:
        """Look up a token record; returns a copy, or None if absent."""
        async with self._lock.read():
            return self._read_unlocked(token_id)

    async def write(self, token_id: TokenId, record: Optional[TokenRecord]) -> None:
        """
        Insert, overwrite (record) or remove (None) a token and persist.

        Raises:
            StoreIOError: If the file could not be rewritten
        """
        async with self._lock.write():
            await self._write_unlocked(token_id, record)

    async def snapshot(self) -> Dict[TokenId, TokenRecord]:
        """Copy of the whole mapping."""
        async with self._lock.read():
            return {token_id: record.copy() for token_id, record in self._tokens.items()}

    @asynccontextmanager
    async def session(self) -> AsyncIterator["StoreSession"]:
        """
        Hold the store exclusively for a read-modify-write sequence.

        Example:
            async with store.session() as session:
                record = session.read(token_id)
                await session.write(token_id, None)
        """
        async with self._lock.write():
            session = StoreSession(self)
            try:
                yield session
            finally:
                session._closed = True

    def _read_unlocked(self, token_id: TokenId) -> Optional[TokenRecord]:
        record = self._tokens.get(token_id)
        return record.copy() if record is not None else None

    async def _write_unlocked(self, token_id: TokenId, record: Optional[TokenRecord]) -> None:
        if record is None:
            self._tokens.pop(token_id, None)
        else:
            self._tokens[token_id] = record.copy()
        await self._persist()

    async def _persist(self) -> None:
        """Atomic rewrite: write the full mapping to a temp file, then rename"""
        try:
            data = encode_tokens(self._tokens)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize token store: {e}")
            raise StoreIOError(f"Failed to serialize token store: {e}", path=str(self.path), cause=e)

        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            async with aiofiles.open(temp_path, 'w', encoding='utf-8') as f:
                await f.write(data)
                await f.flush()
            os.chmod(temp_path, 0o600)
            await aiofiles.os.replace(temp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}")
            try:
                await aiofiles.os.remove(temp_path)
            except FileNotFoundError:
                pass
            except OSError as cleanup_error:
                logger.warning(f"Failed to remove {temp_path}: {cleanup_error}")
            raise StoreIOError(f"Failed to write {self.path}: {e}", path=str(self.path), cause=e)

        logger.debug(f"Persisted {len(self._tokens)} tokens to {self.path}")


class StoreSession:
    """Exclusive view of a TokenStore, valid inside TokenStore.session()"""

    def __init__(self, store: TokenStore):
        self._store = store
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("store session used after it was closed")

    def read(self, token_id: TokenId) -> Optional[TokenRecord]:
        self._check_open()
        return self._store._read_unlocked(token_id)

    def items(self) -> Dict[TokenId, TokenRecord]:
        self._check_open()
        return {token_id: record.copy() for token_id, record in self._store._tokens.items()}

    async def write(self, token_id: TokenId, record: Optional[TokenRecord]) -> None:
        self._check_open()
        await self._store._write_unlocked(token_id, record)

    async def write_many(self, changes: Dict[TokenId, Optional[TokenRecord]]) -> None:
        """Apply several changes with a single persist."""
        self._check_open()
        for token_id, record in changes.items():
            if record is None:
                self._store._tokens.pop(token_id, None)
            else:
                self._store._tokens[token_id] = record.copy()
        await self._store._persist()
