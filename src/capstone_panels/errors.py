from __future__ import annotations

from typing import Optional


class PanelServiceError(Exception):
    """Base class for errors raised by the panel and assignment engines."""

    code = "panel_service_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidSelection(PanelServiceError):
    code = "invalid_selection"


class DuplicatePanel(PanelServiceError):
    code = "duplicate_panel"


class FacultyAlreadyAssigned(PanelServiceError):
    code = "faculty_already_assigned"

    def __init__(self, faculty_id: str, panel_id: str) -> None:
        super().__init__(f"Faculty {faculty_id} is already a member of panel {panel_id}")
        self.faculty_id = faculty_id
        self.panel_id = panel_id


class ConflictError(PanelServiceError):
    """The project's guide sits on the target panel."""

    code = "guide_conflict"

    def __init__(self, reason: str, guide_id: Optional[str] = None) -> None:
        super().__init__(reason)
        self.guide_id = guide_id


class NotFound(PanelServiceError):
    code = "not_found"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind.capitalize()} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class OperationInProgress(PanelServiceError):
    code = "operation_in_progress"

    def __init__(self, context: str, operation: str) -> None:
        super().__init__(f"{operation} is already running for {context}")
        self.operation = operation


class OperationTimeout(PanelServiceError):
    code = "operation_timeout"


__all__ = [
    "ConflictError",
    "DuplicatePanel",
    "FacultyAlreadyAssigned",
    "InvalidSelection",
    "NotFound",
    "OperationInProgress",
    "OperationTimeout",
    "PanelServiceError",
]
