"""
Client directory: clients aggregated from appointments and invoices.
"""

from .directory import (
    VIP_THRESHOLD,
    ClientBadge,
    ClientProfile,
    build_client_directory,
    directory_stats,
    search_clients,
)

__all__ = [
    "ClientBadge",
    "ClientProfile",
    "VIP_THRESHOLD",
    "build_client_directory",
    "directory_stats",
    "search_clients",
]
