"""Tests for per-project and per-panel mark completion."""

from __future__ import annotations

import pytest

from capstone_panels.marks import (
    SchemaCache,
    build_review_options,
    compute_panel_mark_summary,
    compute_project_mark_status,
    resolve_context,
    review_has_positive_marks,
)
from capstone_panels.models.records import Panel, Review
from capstone_panels.models.results import PanelMarkStatus, PanelView, ProjectMarkStatus, TeamView

from factories import DEPARTMENT, SCHOOL, make_project, make_schema, make_student


@pytest.fixture
def panel() -> Panel:
    return Panel(panel_id="panel-1", faculty_ids=["f-a", "f-b"], school=SCHOOL, department=DEPARTMENT)


@pytest.fixture
def cache() -> SchemaCache:
    schemas = {(SCHOOL, DEPARTMENT): make_schema()}
    return SchemaCache(lambda school, department: schemas.get((school, department)))


def _view(panel, projects) -> PanelView:
    return PanelView(
        panel_id=panel.panel_id,
        faculty_ids=panel.faculty_ids,
        school=panel.school,
        department=panel.department,
        teams=[TeamView(id=p.project_id, name=p.name, project=p) for p in projects],
    )


class TestReviewHasPositiveMarks:
    @pytest.mark.parametrize(
        "marks,expected",
        [
            ({"presentation": 0, "content": "8"}, True),
            ({"presentation": 3.5}, True),
            ({"presentation": 0, "content": "0"}, False),
            ({"presentation": -2}, False),
            ({"presentation": "  "}, False),
            ({"presentation": "n/a"}, False),
            ({"presentation": None}, False),
            ({"presentation": True}, False),
            ({"presentation": float("nan")}, False),
            ({}, False),
        ],
    )
    def test_positive_floor(self, marks, expected) -> None:
        assert review_has_positive_marks(Review(marks=marks)) is expected

    def test_missing_review(self) -> None:
        assert not review_has_positive_marks(None)


class TestComputeProjectMarkStatus:
    def test_zero_marks_alongside_positive_string_counts(self, panel, cache) -> None:
        project = make_project("p-1", students=[make_student("s1", {"review2": {"presentation": 0, "content": "8"}})])

        info = compute_project_mark_status(project, panel, cache, "review2")

        assert info.status == ProjectMarkStatus.FULL
        assert info.review_names == ["review2"]

    def test_partial_when_some_reviews_missing(self, panel, cache) -> None:
        project = make_project(
            "p-1",
            students=[
                make_student("s1", {"review1": {"presentation": 7}, "review2": {"content": 6}}),
                make_student("s2", {"review1": {"presentation": 5}}),
            ],
        )

        info = compute_project_mark_status(project, panel, cache)

        assert info.review_names == ["review1", "review2"]
        assert info.students_with_marks == 2
        assert info.students_fully_marked == 1
        assert info.status == ProjectMarkStatus.PARTIAL

    def test_guide_reviews_are_ignored(self, panel, cache) -> None:
        project = make_project("p-1", students=[make_student("s1", {"review0": {"abstract": 9}})])
        assert compute_project_mark_status(project, panel, cache).status == ProjectMarkStatus.NONE

    def test_unknown_review_selection(self, panel, cache) -> None:
        info = compute_project_mark_status(make_project("p-1"), panel, cache, "review0")
        assert info.status == ProjectMarkStatus.NO_REVIEW
        assert info.review_names == ["review1", "review2"]

    def test_missing_schema(self, cache) -> None:
        other = Panel(panel_id="panel-x", faculty_ids=["f-x", "f-y"], school="SELECT", department="MTech")
        info = compute_project_mark_status(make_project("p-1"), other, cache)
        assert info.status == ProjectMarkStatus.NO_SCHEMA

    def test_project_context_wins_over_panel(self, panel, cache) -> None:
        project = make_project("p-1", school="SELECT", department="MTech")
        assert resolve_context(project, panel) == ("SELECT", "MTech")
        assert compute_project_mark_status(project, panel, cache).status == ProjectMarkStatus.NO_SCHEMA

    def test_no_students_is_none(self, panel, cache) -> None:
        info = compute_project_mark_status(make_project("p-1", students=[]), panel, cache)
        assert info.status == ProjectMarkStatus.NONE
        assert info.total_students == 0


class TestComputePanelMarkSummary:
    def test_no_projects(self, panel, cache) -> None:
        result = compute_panel_mark_summary(_view(panel, []), cache)
        assert result.summary.status == PanelMarkStatus.NO_PROJECTS
        assert result.summary.total_projects == 0

    def test_all_partial_none(self, panel, cache) -> None:
        full = make_project("p-1", students=[make_student("s1", {"review1": {"presentation": 4}, "review2": {"content": 4}})])
        half = make_project("p-2", students=[make_student("s2", {"review1": {"presentation": 4}})])
        blank = make_project("p-3")

        assert compute_panel_mark_summary(_view(panel, [full]), cache).summary.status == PanelMarkStatus.ALL
        assert compute_panel_mark_summary(_view(panel, [blank]), cache).summary.status == PanelMarkStatus.NONE

        result = compute_panel_mark_summary(_view(panel, [full, half, blank]), cache)
        summary = result.summary
        assert summary.status == PanelMarkStatus.PARTIAL
        assert (summary.total_projects, summary.fully_marked_projects, summary.marked_projects) == (3, 1, 2)
        assert (summary.partial_projects, summary.unmarked_projects) == (1, 1)
        assert [t.mark_status.status for t in result.teams] == [
            ProjectMarkStatus.FULL,
            ProjectMarkStatus.PARTIAL,
            ProjectMarkStatus.NONE,
        ]

    def test_panel_of_unconfigured_projects_does_not_raise(self, cache) -> None:
        other = Panel(panel_id="panel-x", faculty_ids=["f-x", "f-y"], school="SELECT", department="MTech")
        result = compute_panel_mark_summary(_view(other, [make_project("p-1"), make_project("p-2")]), cache)

        assert all(t.mark_status.status == ProjectMarkStatus.NO_SCHEMA for t in result.teams)
        assert result.summary.status == PanelMarkStatus.NONE


class TestSchemaCache:
    def test_loads_each_key_once_including_misses(self) -> None:
        calls = []

        def loader(school, department):
            calls.append((school, department))
            return None

        cache = SchemaCache(loader)
        cache.get("SCOPE", "BTech")
        cache.get("SCOPE", "BTech")
        cache.get(None, "BTech")

        assert calls == [("SCOPE", "BTech")]
        assert "SCOPE|||BTech" in cache

    def test_review_options_use_display_names(self, cache) -> None:
        cache.get(SCHOOL, DEPARTMENT)
        options = build_review_options(cache)
        assert [(o.value, o.label) for o in options] == [("review1", "Review 1"), ("review2", "Review 2")]
