"""GSC Connector — Operation Errors.

Transport/auth failures live with the HTTP client
(``app.connectors.gsc.client.SearchConsoleAPIError``).
"""

from typing import Optional


class InputValidationError(Exception):
    """Raised for bad input before any network call is made."""


class OperationError(Exception):
    """Raised when an item fails and the batch is not allowed to continue."""

    def __init__(self, message: str, item_index: Optional[int] = None):
        self.item_index = item_index
        super().__init__(message)
