"""Application layer: session lifecycle, local record store and dashboard helpers."""

from .csv_export import export_filename, export_records_csv, write_csv_export
from .record_store import LocalRecordStore
from .session_manager import LoggingSessionNotifier, SessionManager
from .session_status import format_time_remaining, is_expiring_soon
from .user_admin import UserAdministration, UserSessionStats, compute_user_stats

__all__ = [
    "SessionManager",
    "LoggingSessionNotifier",
    "LocalRecordStore",
    "UserAdministration",
    "UserSessionStats",
    "compute_user_stats",
    "export_records_csv",
    "export_filename",
    "write_csv_export",
    "format_time_remaining",
    "is_expiring_soon",
]
