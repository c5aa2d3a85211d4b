"""
Application Wiring

Builds the ledger engine and the assistant query surface from
configuration, boots the engine, and hands both to the application shell.

DESIGN DECISION: There is no global ledger. The shell owns the engine
returned here and passes it to whatever needs it.
"""

from datetime import datetime
from typing import Callable, Optional

from pocketledger.config import LedgerSettings, StorageSettings, get_settings
from pocketledger.ledger import LedgerEngine
from pocketledger.log import configure_logging
from pocketledger.queries import LedgerQueryExecutor
from pocketledger.services.storage import LedgerStorageInterface, create_gateway


def create_app_components(
    storage: Optional[LedgerStorageInterface] = None,
    storage_settings: Optional[StorageSettings] = None,
    ledger_settings: Optional[LedgerSettings] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> tuple[LedgerEngine, LedgerQueryExecutor]:
    """
    Factory function to create and boot all application components.
    
    Args:
        storage: Storage backend; built from `storage_settings` if omitted
        storage_settings: Used only when `storage` is not given
        ledger_settings: Engine settings; read from the environment if omitted
        clock: Source of the current local time
        
    Returns:
        (engine, query_executor)
    """
    ledger_settings = ledger_settings or get_settings().ledger
    configure_logging(ledger_settings)
    
    storage = storage or create_gateway(storage_settings)
    engine = LedgerEngine(storage, settings=ledger_settings, clock=clock)
    engine.boot()
    
    executor = LedgerQueryExecutor(
        engine,
        breakdown_limit=ledger_settings.breakdown_limit,
        search_limit=ledger_settings.search_result_limit,
    )
    return engine, executor
