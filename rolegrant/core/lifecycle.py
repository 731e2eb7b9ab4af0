"""
Token lifecycle manager for rolegrant.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

Issues, revokes, redeems and inspects use-limited, time-bounded tokens
that bind a list of privilege identifiers (for example role ids).
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Union
import logging

from .config import Config
from .types import AuditEvent, AuditEventType, TokenId, TokenRecord
from ..audit.logger import AuditLogger, create_audit_logger
from ..common.utils import format_token_id, generate_token_id, get_current_time
from ..errors import (
    ErrorCode,
    StoreExistsError,
    StoreIOError,
    TokenExpiredError,
    TokenNotFoundError,
    ValidationError,
)
from ..metrics.collector import MetricsCollector, create_metrics_collector
from ..tokenstore.store import TokenStore
from ..util.validation import (
    parse_token_id,
    validate_privileges,
    validate_ttl,
    validate_uses,
)


class TokenLifecycleManager:
    """
    Issues and redeems tokens on top of a shared TokenStore.

    Use TokenLifecycleManager.open() to load the configured store, or pass
    an already loaded store to the constructor. Every operation that
    changes a token has been written to the store file when it returns.
    """

    def __init__(
        self,
        store: TokenStore,
        config: Optional[Config] = None,
        audit_logger: Optional[AuditLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = get_current_time,
    ):
        """
        Initialize the manager.

        Args:
            store: Loaded token store
            config: Configuration (defaults used when omitted)
            audit_logger: Audit logging implementation (defaults to in-memory)
            metrics: Metrics collector (defaults to a private collector)
            clock: Returns the current aware UTC time
        """
        self.store = store
        self.config = config or Config()
        self.audit_logger = audit_logger or create_audit_logger(
            "memory", max_entries=self.config.audit_max_entries
        )
        self.metrics = metrics or create_metrics_collector(enabled=self.config.metrics_enabled)
        self._clock = clock
        self.logger = logging.getLogger(__name__)
        self.metrics.set_active_tokens(len(store))

    @classmethod
    async def open(
        cls,
        config: Optional[Config] = None,
        audit_logger: Optional[AuditLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = get_current_time,
    ) -> "TokenLifecycleManager":
        """
        Load the configured store and build a manager around it.

        The store file is only created when config.create_if_missing is set.

        Raises:
            ConfigurationError: If configuration is invalid
            StoreIOError: If the store file is missing or unreadable
            StoreFormatError: If the store file is malformed

        Example:
            manager = await TokenLifecycleManager.open(Config(store_path="tokens.json"))
            token_id = await manager.issue(["1234"], limit=2)
        """
        config = config or Config()
        config.validate()

        if config.create_if_missing:
            try:
                store = await TokenStore.initialize(config.store_path)
            except StoreExistsError:
                store = await TokenStore.load(config.store_path)
        else:
            store = await TokenStore.load(config.store_path)

        if audit_logger is None and config.audit_log_path:
            audit_logger = create_audit_logger("file", file_path=config.audit_log_path)

        return cls(store, config, audit_logger, metrics, clock)

    async def issue(
        self,
        privileges: Sequence[str],
        limit: Optional[int] = None,
        ttl: Optional[timedelta] = None,
    ) -> TokenId:
        """
        Mint a token bound to privileges.

        Args:
            privileges: Non-empty sequence of privilege identifiers, kept in order
            limit: Number of redemptions allowed (default config.default_uses)
            ttl: Time until expiration (default config.default_ttl)

        Returns:
            The new token identifier

        Raises:
            ValidationError: If an argument is invalid
            StoreIOError: If the store file could not be rewritten
        """
        privileges = validate_privileges(privileges)
        limit = validate_uses(self.config.default_uses if limit is None else limit)
        ttl = validate_ttl(self.config.default_ttl if ttl is None else ttl)

        try:
            expiration = self._clock() + ttl
        except OverflowError as e:
            raise ValidationError("ttl is too large", field="ttl",
                                  code=ErrorCode.INVALID_PARAMETER, cause=e)

        # A colliding identifier overwrites the existing record
        token_id = generate_token_id()
        record = TokenRecord(
            privileges=privileges,
            remaining_uses=limit,
            expiration=expiration,
        )

        await self._write("issue", token_id, record)

        self.logger.info(
            f"Issued token {token_id}: {len(privileges)} privileges, "
            f"{limit} uses, expires {record.expiration.isoformat()}"
        )
        self.metrics.record_token_operation("issue", "success")
        await self._audit(AuditEventType.TOKEN_ISSUED, token_id, {
            "privileges": privileges,
            "remaining_uses": limit,
            "expiration": record.expiration.isoformat(),
        })
        return token_id

    async def revoke(self, token_id: Union[TokenId, str]) -> None:
        """
        Remove a token. Revoking an unknown token is not an error.

        Raises:
            ValidationError: If token_id is not a valid identifier
            StoreIOError: If the store file could not be rewritten
        """
        token_id = parse_token_id(token_id)

        async with self.store.session() as session:
            existed = session.read(token_id) is not None
            try:
                await session.write(token_id, None)
            except StoreIOError:
                self.metrics.record_persist_failure("revoke")
                raise

        self.logger.info(f"Revoked token {token_id} (existed={existed})")
        self.metrics.record_token_operation("revoke", "success")
        self.metrics.set_active_tokens(len(self.store))
        await self._audit(AuditEventType.TOKEN_REVOKED, token_id, {"existed": existed})

    async def redeem(self, token_id: Union[TokenId, str]) -> List[str]:
        """
        Consume one use of a token and return its privileges.

        The lookup, expiration check, decrement and rewrite happen while
        holding the store exclusively, so concurrent redemptions never
        succeed more often than the token's use limit. A token that runs
        out of uses, or is found expired, is removed from the store.

        Returns:
            The full privilege list bound to the token

        Raises:
            TokenNotFoundError: If no such token exists
            TokenExpiredError: If the token is past its expiration or has no uses left
            StoreIOError: If the store file could not be rewritten
        """
        token_id = parse_token_id(token_id)

        async with self.store.session() as session:
            record = session.read(token_id)
            if record is not None:
                if record.is_expired(self._clock()):
                    record.remaining_uses = 0
                expired = record.remaining_uses == 0
                if not expired:
                    record.remaining_uses -= 1
                try:
                    await session.write(token_id, record if record.remaining_uses > 0 else None)
                except StoreIOError:
                    self.metrics.record_persist_failure("redeem")
                    raise

        if record is None:
            self.metrics.record_token_operation("redeem", "not_found")
            await self._audit(AuditEventType.TOKEN_REDEEM_FAILED, token_id, {"reason": "not_found"})
            raise TokenNotFoundError(token_id)

        self.metrics.set_active_tokens(len(self.store))

        if expired:
            self.logger.warning(f"Redemption of expired token {token_id}; token removed")
            self.metrics.record_token_operation("redeem", "expired")
            await self._audit(AuditEventType.TOKEN_REDEEM_FAILED, token_id, {"reason": "expired"})
            raise TokenExpiredError(token_id)

        self.logger.info(f"Redeemed token {token_id} ({record.remaining_uses} uses left)")
        self.metrics.record_token_operation("redeem", "success")
        await self._audit(AuditEventType.TOKEN_REDEEMED, token_id, {
            "privileges": record.privileges,
            "remaining_uses": record.remaining_uses,
        })
        return list(record.privileges)

    async def inspect(self, token_id: Union[TokenId, str]) -> Optional[TokenRecord]:
        """Look up a token without changing it; None if absent."""
        return await self.store.read(parse_token_id(token_id))

    async def list_tokens(self) -> Dict[TokenId, TokenRecord]:
        """Snapshot of every token in the store."""
        return await self.store.snapshot()

    async def purge_expired(self) -> int:
        """
        Remove every token past its expiration with a single rewrite.

        Returns:
            Number of tokens removed
        """
        async with self.store.session() as session:
            now = self._clock()
            expired = [
                token_id for token_id, record in session.items().items()
                if record.is_expired(now)
            ]
            if expired:
                try:
                    await session.write_many({token_id: None for token_id in expired})
                except StoreIOError:
                    self.metrics.record_persist_failure("purge")
                    raise

        if expired:
            self.logger.info(f"Purged {len(expired)} expired tokens")
            self.metrics.set_active_tokens(len(self.store))
            await self._audit(AuditEventType.TOKENS_PURGED, None, {
                "token_ids": [format_token_id(token_id) for token_id in expired],
            })
        self.metrics.record_token_operation("purge", "success")
        return len(expired)

    async def close(self) -> None:
        """Release the audit logger."""
        await self.audit_logger.close()

    async def __aenter__(self) -> "TokenLifecycleManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _write(self, operation: str, token_id: TokenId, record: Optional[TokenRecord]) -> None:
        try:
            await self.store.write(token_id, record)
        except StoreIOError:
            self.metrics.record_persist_failure(operation)
            raise
        self.metrics.set_active_tokens(len(self.store))

    async def _audit(self, event_type: AuditEventType, token_id: Optional[TokenId], details: Dict) -> None:
        await self.audit_logger.log(AuditEvent(
            event_id="",
            event_type=event_type,
            token_id=format_token_id(token_id) if token_id is not None else None,
            timestamp=self._clock(),
            details=details,
        ))
