"""Capstone Panels - Core Package

Evaluation panel formation, conflict-aware team assignment and review
completion reporting for capstone project administration.
"""

__version__ = "1.0.0"
__author__ = "Capstone Review Admin Team"

from .assignment import assign_project, auto_assign_all, set_project_panel, teams_for_panel, unassign_project
from .conflicts import build_guide_index, can_assign
from .marks import SchemaCache, compute_panel_mark_summary, compute_project_mark_status
from .panel_formation import auto_create_panels, create_panel, remove_panel
from .report import generate_report
from .store import ContextStore

__all__ = [
    "ContextStore",
    "SchemaCache",
    "assign_project",
    "auto_assign_all",
    "auto_create_panels",
    "build_guide_index",
    "can_assign",
    "compute_panel_mark_summary",
    "compute_project_mark_status",
    "create_panel",
    "generate_report",
    "remove_panel",
    "set_project_panel",
    "teams_for_panel",
    "unassign_project",
]
