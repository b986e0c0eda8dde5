"""
Ledger dependency for the API routers

One process-wide Ledger is created on first use and shared by every
request; the ledger serialises access itself.
"""

import threading
from typing import Optional

from ..config import get_config
from ..ledger import Ledger
from ..seed import seed_demo_data

_ledger: Optional[Ledger] = None
_ledger_lock = threading.Lock()


def get_ledger() -> Ledger:
    """Get the shared ledger, creating (and optionally seeding) it on first call"""
    global _ledger
    with _ledger_lock:
        if _ledger is None:
            ledger = Ledger()
            if get_config().seed_demo_data:
                seed_demo_data(ledger)
            _ledger = ledger
        return _ledger


def reset_ledger() -> None:
    """Drop the shared ledger; the next request starts from an empty one"""
    global _ledger
    with _ledger_lock:
        _ledger = None
