from .counters import CacheCounterStore
from .ingestion import IngestionService, StoredFile
from .quota import QuotaService

__all__ = [
    'CacheCounterStore',
    'IngestionService',
    'StoredFile',
    'QuotaService',
]
