"""
Component search.

Finds components for a free-text query using two strategies in order:
  1. Case-insensitive substring match on description, supplier model and brand
  2. Fuzzy match (rapidfuzz) when the substring pass finds nothing
"""
import logging

from rapidfuzz import fuzz

from models.component import Component

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
FUZZY_THRESHOLD = 70     # minimum rapidfuzz score (0-100)


class ComponentSearch:
    """
    Usage:
        search = ComponentSearch(snapshot.components)
        matches = search.search("mppt 60a")
    """

    def __init__(self, components: list[Component], fuzzy_threshold: int = FUZZY_THRESHOLD):
        self.components = components
        self.fuzzy_threshold = fuzzy_threshold

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[Component]:
        q = (query or "").strip().lower()
        if not q or limit <= 0:
            return []

        matches = [
            c for c in self.components
            if any(q in f.lower() for f in c.searchable_fields)
        ]
        if matches:
            return matches[:limit]

        return self._fuzzy(q, limit)

    def _fuzzy(self, q: str, limit: int) -> list[Component]:
        scored: list[tuple[float, int, Component]] = []
        for pos, c in enumerate(self.components):
            best = max(
                (fuzz.token_sort_ratio(q, f.lower()) for f in c.searchable_fields),
                default=0,
            )
            if best >= self.fuzzy_threshold:
                scored.append((best, pos, c))

        # Highest score first, input order among equal scores
        scored.sort(key=lambda s: (-s[0], s[1]))
        logger.debug("Fuzzy component search '%s': %d candidates", q, len(scored))
        return [c for _, _, c in scored[:limit]]
