"""In-memory result cache keyed by resolved target path."""

from __future__ import annotations

import logging
from dataclasses import replace

from sitelens.models import ScanBucket
from sitelens.paths import canonical_key

logger = logging.getLogger(__name__)


class ResultCache:
    """Latest scan output per resolved target, merged field-wise.

    Lives as long as the serving process; there is no eviction and no
    locking. Callers run one tool invocation at a time.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, ScanBucket] = {}

    def get(self, resolved: str) -> ScanBucket | None:
        bucket = self._buckets.get(canonical_key(resolved))
        return replace(bucket) if bucket is not None else None

    def put(self, resolved: str, update: ScanBucket) -> ScanBucket:
        """Merge the families present in ``update``; others are preserved."""
        key = canonical_key(resolved)
        current = self._buckets.get(key) or ScanBucket()
        changes = {name: getattr(update, name) for name in update.families()}
        merged = replace(current, **changes)
        self._buckets[key] = merged
        logger.debug("cache put %s families=%s", key, sorted(changes))
        return replace(merged)

    def targets(self) -> list[str]:
        return list(self._buckets)

    def clear(self) -> None:
        self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)
