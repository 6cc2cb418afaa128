"""
Read-only projections of an RFI list: status filter, creation-time sort, text search.

Every function returns a new list and leaves its input untouched.
"""

from typing import List, Optional, Sequence

from rfi_tracker.schemas.rfi import RFIRead, RFIStatus

ALL_STATUSES = "All"
NEWEST = "Newest"
OLDEST = "Oldest"
SORT_ORDERS = (NEWEST, OLDEST)


def filter_by_status(rfis: Sequence[RFIRead], status: str = ALL_STATUSES) -> List[RFIRead]:
    if status == ALL_STATUSES:
        return list(rfis)
    wanted = RFIStatus(status)
    return [rfi for rfi in rfis if rfi.status == wanted]


def sort_by_created(rfis: Sequence[RFIRead], order: str = NEWEST) -> List[RFIRead]:
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {order}")
    return sorted(rfis, key=lambda rfi: rfi.created_at, reverse=order == NEWEST)


def search(rfis: Sequence[RFIRead], term: Optional[str] = None) -> List[RFIRead]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(rfis)
    return [
        rfi for rfi in rfis
        if needle in rfi.title.lower() or needle in (rfi.description or "").lower()
    ]


def project_rfis_view(
    rfis: Sequence[RFIRead],
    status: str = ALL_STATUSES,
    order: str = NEWEST,
    term: Optional[str] = None,
) -> List[RFIRead]:
    return sort_by_created(search(filter_by_status(rfis, status), term), order)
