"""Infrastructure-specific error codes.

Internal codes for tracking policy store failures. Every PolicyStoreError
carries one of them so callers can branch without parsing messages.

Categories:
- Connection errors (DATABASE_CONNECTION_*, DATABASE_TIMEOUT)
- Schema errors (DATABASE_INDEX_*)
- Query errors (DATABASE_QUERY_*, DATABASE_WRITE_*)
- Data errors (DATABASE_DATA_ERROR)
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Infrastructure-specific error codes."""

    # Connection errors
    DATABASE_CONNECTION_FAILED = "database_connection_failed"
    DATABASE_TIMEOUT = "database_timeout"

    # Schema errors
    DATABASE_INDEX_FAILED = "database_index_failed"
    DATABASE_INDEX_CONFLICT = "database_index_conflict"

    # Query errors
    DATABASE_QUERY_FAILED = "database_query_failed"
    DATABASE_WRITE_FAILED = "database_write_failed"

    # Data errors
    DATABASE_DATA_ERROR = "database_data_error"
