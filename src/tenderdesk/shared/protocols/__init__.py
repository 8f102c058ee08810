"""Protocol definitions for dependency inversion."""

from __future__ import annotations

from .services import CompanyContextProtocol, DataCollaboratorProtocol, NotifierProtocol

__all__ = ["CompanyContextProtocol", "DataCollaboratorProtocol", "NotifierProtocol"]
