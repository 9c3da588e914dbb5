"""Tests for guide-on-own-panel conflict detection."""

from __future__ import annotations

from capstone_panels.conflicts import build_guide_index, can_assign
from capstone_panels.models.records import GuideProjects

from factories import make_faculty, make_project


def _index():
    guide = make_faculty("f-a", "Asha")
    return build_guide_index([GuideProjects(faculty=guide, guided_projects=[make_project("p-1")])])


class TestCanAssign:
    def test_guide_on_panel_is_refused(self) -> None:
        check = can_assign("p-1", ["f-a", "f-b"], _index())
        assert not check.allowed
        assert check.reason == "Cannot assign: Asha is the guide for this project"

    def test_panel_without_guide_is_allowed(self) -> None:
        check = can_assign("p-1", ["f-c", "f-d"], _index())
        assert check.allowed
        assert check.reason is None

    def test_unknown_guide_relation_fails_open(self) -> None:
        assert can_assign("p-unknown", ["f-a", "f-b"], _index()).allowed


class TestBuildGuideIndex:
    def test_falls_back_to_project_guide_id(self) -> None:
        index = build_guide_index([], [make_project("p-9", guide_id="f-z")])
        check = can_assign("p-9", ["f-z", "f-y"], index)
        assert not check.allowed
        assert "f-z" in check.reason

    def test_guide_feed_overrides_project_field(self) -> None:
        guide = make_faculty("f-a", "Asha")
        index = build_guide_index(
            [GuideProjects(faculty=guide, guided_projects=[make_project("p-1")])],
            [make_project("p-1", guide_id="f-old")],
        )
        assert index["p-1"].guide_id == "f-a"
        assert index["p-1"].guide_name == "Asha"
