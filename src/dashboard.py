"""
Dashboard service: refresh cycle and presentation payload.

A refresh fetches every source file, normalizes the damage log and publishes
the result as one immutable snapshot. Views are computed from the published
snapshot and the caller's filter criteria, so nothing in the pipeline reads
ambient UI state.
"""

import logging
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import aggregation
from cross_reference import CrossReferenceIndex
from filters import FilterCriteria, filter_records, unique_types
from normalizer import MappingPolicy, RecordMapper, normalize_seniority_rows
from schema import DamageRecord, SenioritySample
from sources import FileFetcher, FileStatus, RawSnapshot, SourceError, default_fetcher, load_snapshot

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """Normalized data of one refresh."""
    records: List[DamageRecord]
    display_headers: List[str]
    seniority: List[SenioritySample]
    index: CrossReferenceIndex
    file_statuses: Dict[str, FileStatus] = field(default_factory=dict)
    token: int = 0
    loaded_at: datetime = field(default_factory=datetime.now)


def build_snapshot(
    raw: RawSnapshot,
    policy: MappingPolicy = MappingPolicy.LENIENT,
    token: int = 0,
) -> DashboardSnapshot:
    """Normalize a RawSnapshot into the canonical dataset and lookup index."""
    mapper = RecordMapper(policy)
    records = mapper.map_rows(raw.damage_rows)

    return DashboardSnapshot(
        records=records,
        display_headers=mapper.display_headers(),
        seniority=normalize_seniority_rows(raw.seniority_rows),
        index=CrossReferenceIndex(
            personnel=raw.personnel,
            coaching_requested=raw.coaching_requested,
            coaching_completed=raw.coaching_completed,
            conversations=raw.conversations,
            allowed_users=raw.allowed_users,
        ),
        file_statuses=dict(raw.file_statuses),
        token=token,
    )


def build_view(snapshot: DashboardSnapshot, criteria: Optional[FilterCriteria] = None) -> Dict[str, Any]:
    """
    Everything the dashboard pages need for the current filters.

    Coaching eligibility ignores the personnel-number search so the list
    stays complete while a single driver is being looked up.
    """
    criteria = criteria or FilterCriteria()
    filtered = filter_records(snapshot.records, criteria)
    without_search = filter_records(snapshot.records, replace(criteria, id_substring=None))

    view = {
        "records": [record.to_dict() for record in filtered],
        "total_records": len(snapshot.records),
        "stats": asdict(aggregation.compute_stats(filtered)),
        "monthly": aggregation.monthly_matrix(filtered),
        "seniority": [asdict(b) for b in aggregation.bin_seniority(snapshot.seniority)],
        "coaching_eligible": [
            asdict(c) for c in aggregation.coaching_eligibility(
                without_search,
                snapshot.index.coaching_completed,
                snapshot.index.coaching_requested,
            )
        ],
        "top_crashers": [asdict(c) for c in aggregation.top_crashers(filtered)],
        "unique_drivers": aggregation.unique_driver_count(filtered),
        "unique_vehicles": aggregation.unique_vehicle_count(filtered),
        "unique_locations": aggregation.unique_location_count(filtered),
        "locations": [asdict(e) for e in aggregation.location_table(filtered)],
        "vehicles": [asdict(v) for v in aggregation.vehicle_table(filtered)],
        "unique_types": unique_types(snapshot.records),
        "display_headers": snapshot.display_headers,
        "file_statuses": {name: status.to_dict() for name, status in snapshot.file_statuses.items()},
        "loaded_at": snapshot.loaded_at.isoformat(),
    }

    if criteria.id_substring:
        query = criteria.id_substring.strip()
        view["driver"] = {
            "personnel": snapshot.index.find_personnel(query),
            "coaching": asdict(snapshot.index.filter_coaching(query)),
            "conversations": snapshot.index.filter_conversations(query),
        }

    return view


class DashboardService:
    """
    Holds the published snapshot and runs refreshes.

    Every refresh takes a ticket from a monotonic counter; a refresh only
    publishes when its ticket is newer than the published one, so a slow
    refresh that finishes late cannot replace newer data.
    """

    def __init__(
        self,
        fetcher_factory: Callable[[], FileFetcher] = default_fetcher,
        main_path: Optional[str] = None,
        policy: MappingPolicy = MappingPolicy.LENIENT,
    ):
        self.fetcher_factory = fetcher_factory
        self.main_path = main_path
        self.policy = policy
        self.last_error: Optional[str] = None
        self.last_error_statuses: Dict[str, FileStatus] = {}
        self._lock = threading.Lock()
        self._issued = 0
        self._snapshot: Optional[DashboardSnapshot] = None

    @property
    def snapshot(self) -> Optional[DashboardSnapshot]:
        return self._snapshot

    def _next_token(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def publish(self, snapshot: DashboardSnapshot) -> bool:
        """Publish a snapshot unless a newer one is already live."""
        with self._lock:
            if self._snapshot is not None and snapshot.token <= self._snapshot.token:
                logger.info(
                    f"[Refresh] Discarding stale snapshot {snapshot.token} "
                    f"(published: {self._snapshot.token})"
                )
                return False
            self._snapshot = snapshot
            self.last_error = None
            self.last_error_statuses = {}
            return True

    def refresh(self) -> Optional[DashboardSnapshot]:
        """
        Fetch, normalize and publish a new snapshot.

        Returns:
            The published snapshot (which may be a newer one than this
            refresh produced)

        Raises:
            SourceError: The damage log could not be loaded
        """
        token = self._next_token()
        logger.info(f"[Refresh] Starting refresh {token}")

        try:
            raw = load_snapshot(self.fetcher_factory(), self.main_path)
        except SourceError as e:
            with self._lock:
                if token == self._issued:
                    self.last_error = str(e)
                    self.last_error_statuses = dict(e.file_statuses)
            logger.error(f"[Refresh] Refresh {token} failed: {e}")
            raise

        self.publish(build_snapshot(raw, self.policy, token))
        return self._snapshot

    def view(self, criteria: Optional[FilterCriteria] = None) -> Dict[str, Any]:
        snapshot = self._snapshot
        if snapshot is None:
            return {
                "error": self.last_error or "Geen gegevens geladen",
                "file_statuses": {n: s.to_dict() for n, s in self.last_error_statuses.items()},
            }
        return build_view(snapshot, criteria)

    def authenticate(self, user: str, password: str) -> bool:
        snapshot = self._snapshot
        if snapshot is None:
            return False
        return snapshot.index.authenticate(user, password)
