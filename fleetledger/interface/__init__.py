"""Mini README: HTTP interface package for Fleet Ledger.

Exposes the FastAPI application factory used by ``fleet_control_centre``
and by tests that exercise the JSON endpoints.
"""

from .web_app import create_application

__all__ = ["create_application"]
