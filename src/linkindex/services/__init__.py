from .scan_service import ScanService, ScanSummary
from .restore_service import RestoreService, RestoreSummary


__all__ = [
    'ScanService',
    'ScanSummary',
    'RestoreService',
    'RestoreSummary',
]
