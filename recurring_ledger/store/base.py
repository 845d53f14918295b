"""Protocol for the read side of obligation storage.

The engine never talks to a store; API routes and the CLI fetch everything
up front and hand plain collections to the engine.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

from recurring_ledger.models.obligation import Obligation, PaymentRecord
from recurring_ledger.models.terms import TermsSnapshot


class ObligationNotFound(LookupError):
    def __init__(self, obligation_id: str):
        super().__init__(f"obligation {obligation_id!r} not found")
        self.obligation_id = obligation_id


@runtime_checkable
class ObligationStore(Protocol):
    async def get_obligation(self, obligation_id: str) -> Obligation:
        """Fetch one normalized obligation. Raises ObligationNotFound."""
        ...

    async def list_obligations(self, include_inactive: bool = False) -> list[Obligation]:
        """Normalized obligations ordered by kind, then title."""
        ...

    async def list_payments(
        self, from_key: str, to_key: str, obligation_id: Optional[str] = None
    ) -> list[PaymentRecord]:
        """Payments with from_key <= period_key <= to_key."""
        ...

    async def list_terms(
        self, obligation_ids: Sequence[str]
    ) -> dict[str, list[TermsSnapshot]]:
        """Terms history per obligation id, each list sorted by from_date."""
        ...


class NotAMortgage(ValueError):
    def __init__(self, obligation_id: str):
        super().__init__(f"obligation {obligation_id!r} is not a mortgage")
        self.obligation_id = obligation_id
