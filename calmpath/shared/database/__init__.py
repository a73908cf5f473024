"""Database access for the append-only analysis store.

Provides PostgreSQL connection pooling, health checks, and the
AnalysisRepository used by the remote classification path.
"""

from .connection import (
    DatabaseConfig,
    ConnectionManager,
    get_connection_manager,
)
from .repository import (
    AppendOnlyRepository,
    RepositoryError,
    DuplicateError,
)
from .analysis_repository import AnalysisRepository, ANALYSIS_TABLE

__all__ = [
    "DatabaseConfig",
    "ConnectionManager",
    "get_connection_manager",
    "AppendOnlyRepository",
    "RepositoryError",
    "DuplicateError",
    "AnalysisRepository",
    "ANALYSIS_TABLE",
]
