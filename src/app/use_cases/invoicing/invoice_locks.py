"""Per-invoice mutual exclusion

Serialises mutations of one invoice inside this process. Locks are held in
a weak mapping and disappear once no coroutine uses them.
"""

import asyncio
import weakref


class InvoiceLocks:

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_invoice(self, invoice_id: str) -> asyncio.Lock:
        lock = self._locks.get(invoice_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[invoice_id] = lock
        return lock


invoice_locks = InvoiceLocks()
