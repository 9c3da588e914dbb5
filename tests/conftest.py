from __future__ import annotations

import os
import tempfile

os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="capstone-panels-data-"))

import pytest

from capstone_panels.models.records import Context
from capstone_panels.store import ContextStore

from factories import DEPARTMENT, SCHOOL, make_faculty, make_project, make_schema


@pytest.fixture
def context() -> Context:
    return Context(school=SCHOOL, department=DEPARTMENT)


@pytest.fixture
def store(tmp_path) -> ContextStore:
    return ContextStore(tmp_path / "contexts")


@pytest.fixture
def faculty():
    return [
        make_faculty("f-a", "Asha"),
        make_faculty("f-b", "Bala"),
        make_faculty("f-c", "Chitra"),
        make_faculty("f-d", "Deepak"),
        make_faculty("f-e", "Esha"),
    ]


@pytest.fixture
def seeded_store(store: ContextStore, context: Context, faculty) -> ContextStore:
    store.save_faculty(context, faculty)
    store.save_projects(
        context,
        [
            make_project("p-1", guide_id="f-a"),
            make_project("p-2", guide_id="f-c"),
            make_project("p-3", guide_id="f-e"),
        ],
    )
    store.save_marking_schema(make_schema())
    return store
