"""
Custom exceptions for store access, argument validation and migration.
"""

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from pocketbase_mcp.schema.migration import MigrationPlan, MigrationState


class PocketBaseMCPError(Exception):
    """Base exception for all pocketbase-mcp errors."""

    pass


class StoreOperationError(PocketBaseMCPError):
    """Raised when a PocketBase API call does not succeed."""

    def __init__(self, message: str, status_code: int | None = None, data: Any = None):
        self.status_code = status_code
        self.data = data
        detail = ""
        if data:
            detail = f" {json.dumps(data, sort_keys=True, default=str)}"
        super().__init__(f"{message}{detail}")


class ArgumentValidationError(PocketBaseMCPError):
    """Raised when a tool argument is missing or invalid."""

    pass


class MigrationError(PocketBaseMCPError):
    """Raised when a migration step fails.

    The state is the last step that completed, so an operator can tell which
    collections exist and what needs manual reconciliation.
    """

    def __init__(
        self,
        message: str,
        state: "MigrationState",
        plan: "MigrationPlan | None" = None,
    ):
        self.state = state
        self.plan = plan
        super().__init__(message)


class ConsistencyError(MigrationError):
    """Raised when the source collection is gone but the shadow was not renamed."""

    pass
