from .lookup import TableIndex
from .cost_allocator import CostAllocator
from .cash_cycle import CashCycleAnalyzer, gap_band
from .search import ComponentSearch
from .loader import SnapshotLoader
from .database import Database

__all__ = [
    "TableIndex", "CostAllocator", "CashCycleAnalyzer", "gap_band",
    "ComponentSearch", "SnapshotLoader", "Database",
]
