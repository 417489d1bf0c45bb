"""
Utility functions for the application.
"""
from typing import Any, Dict


def format_error(message: str, kind: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"detail": message, "kind": kind}
    if details:
        response["details"] = details
    return response
