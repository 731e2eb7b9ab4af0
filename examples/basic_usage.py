"""
Basic rolegrant usage example.

This example demonstrates the fundamental token operations:
- Opening a token store
- Issuing a token
- Redeeming it until it runs out
- Revoking and purging
"""

import asyncio
import tempfile
from datetime import timedelta
from pathlib import Path

from rolegrant import Config, TokenLifecycleManager, TokenNotFoundError, TokenExpiredError


async def basic_example(store_path: Path):
    """Demonstrate basic rolegrant usage"""
    print("Basic rolegrant Example")
    print("=" * 30)

    # 1. Create configuration
    config = Config(store_path=str(store_path), create_if_missing=True)

    # 2. Open the manager
    manager = await TokenLifecycleManager.open(config)
    print(f"✓ Opened token store {store_path}")

    try:
        # 3. Issue a two-use token for two roles
        token_id = await manager.issue(["1001", "1002"], limit=2, ttl=timedelta(hours=1))
        print(f"✓ Token issued: {token_id}")

        # 4. Redeem it until it is used up
        for attempt in range(3):
            try:
                roles = await manager.redeem(token_id)
                print(f"✓ Redemption {attempt + 1} granted: {', '.join(roles)}")
            except (TokenNotFoundError, TokenExpiredError) as e:
                print(f"✗ Redemption {attempt + 1} refused: {e}")

        # 5. Revoke a token that was never redeemed
        spare = await manager.issue(["2001"])
        await manager.revoke(spare)
        print(f"✓ Token revoked, inspect returns: {await manager.inspect(spare)}")

        # 6. Purge anything past its expiration
        print(f"✓ Expired tokens purged: {await manager.purge_expired()}")

        # 7. Check audit logs
        events = await manager.audit_logger.get_events()
        print(f"✓ Audit events logged: {len(events)}")

    finally:
        # 8. Cleanup
        await manager.close()
        print("✓ Manager closed")


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        asyncio.run(basic_example(Path(tmp) / "tokens.json"))
