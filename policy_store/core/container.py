"""Dependency factories (composition root).

Application-scoped singletons:
- Logger (structlog console adapter)
- Casbin AsyncEnforcer backed by MongoAdapter

The enforcer owns an adapter created from settings, so the application must
call shutdown_enforcer() on its exit path to release the MongoDB client.

Usage:
    enforcer = await init_enforcer()
    try:
        allowed = enforcer.enforce("alice", "data1", "read")
    finally:
        await shutdown_enforcer()
"""

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from policy_store.core.config import get_settings

if TYPE_CHECKING:
    from casbin import AsyncEnforcer

    from policy_store.domain.protocols import LoggerProtocol
    from policy_store.infrastructure.persistence import MongoAdapter


DEFAULT_MODEL_PATH = (
    Path(__file__).resolve().parent.parent / "infrastructure" / "authorization" / "model.conf"
)

# Module-level state for enforcer singleton
_enforcer: "AsyncEnforcer | None" = None
_adapter: "MongoAdapter | None" = None


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    - development/production: ConsoleAdapter (human-readable)
    - testing/ci: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from policy_store.infrastructure.logging import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(use_json=settings.uses_json_logs, level=settings.log_level)


# ============================================================================
# Authorization (Casbin RBAC)
# ============================================================================


async def init_enforcer(model_path: str | Path | None = None) -> "AsyncEnforcer":
    """Initialize the Casbin AsyncEnforcer at application startup.

    Creates the enforcer with:
    - Model config from ``model_path``, settings, or the bundled RBAC model
    - MongoAdapter connected with settings.mongo_url

    Args:
        model_path: Path to a Casbin model.conf.

    Returns:
        Initialized AsyncEnforcer with policy loaded.

    Raises:
        RuntimeError: If enforcer is already initialized.
        PolicyStoreConnectionError: If MongoDB is unreachable.
        PolicyStoreError: If loading the policy fails.
    """
    global _enforcer, _adapter

    if _enforcer is not None:
        raise RuntimeError("Enforcer already initialized")

    import casbin

    from policy_store.infrastructure.persistence import MongoAdapter

    settings = get_settings()
    path = str(model_path or settings.casbin_model_path or DEFAULT_MODEL_PATH)

    adapter = await MongoAdapter.from_url(settings.mongo_url, settings=settings)
    try:
        enforcer = casbin.AsyncEnforcer(path, adapter)
        await enforcer.load_policy()
    except Exception:
        await adapter.close()
        raise

    _enforcer = enforcer
    _adapter = adapter

    get_logger().info("casbin_enforcer_initialized", model_path=path)

    return enforcer


def get_enforcer() -> "AsyncEnforcer":
    """Get Casbin AsyncEnforcer singleton.

    Returns:
        The initialized enforcer.

    Raises:
        RuntimeError: If called before init_enforcer().
    """
    if _enforcer is None:
        raise RuntimeError(
            "Enforcer not initialized. Call init_enforcer() during startup."
        )
    return _enforcer


async def shutdown_enforcer() -> None:
    """Close the enforcer's adapter and clear the singleton.

    Safe to call when the enforcer was never initialized.
    """
    global _enforcer, _adapter

    adapter = _adapter
    _enforcer = None
    _adapter = None

    if adapter is not None:
        await adapter.close()
        get_logger().info("casbin_enforcer_shutdown")
