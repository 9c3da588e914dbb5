from __future__ import annotations

from capstone_panels.models.records import (
    Faculty,
    MarkingSchema,
    Project,
    Review,
    Student,
)

SCHOOL = "SCOPE"
DEPARTMENT = "BTech"


def make_faculty(fid: str, name: str, employee_id: str = "", specializations=None) -> Faculty:
    return Faculty(id=fid, name=name, employee_id=employee_id or fid.upper(), specializations=specializations or [])


def make_student(reg_no: str, reviews=None) -> Student:
    return Student(
        reg_no=reg_no,
        name=f"Student {reg_no}",
        reviews={name: Review(marks=marks) for name, marks in (reviews or {}).items()},
    )


def make_project(pid: str, guide_id=None, panel_id=None, students=None, **extra) -> Project:
    return Project(
        project_id=pid,
        name=f"Project {pid}",
        guide_id=guide_id,
        panel_id=panel_id,
        students=students if students is not None else [make_student(f"{pid}-s1")],
        **extra,
    )


def make_schema(school: str = SCHOOL, department: str = DEPARTMENT) -> MarkingSchema:
    return MarkingSchema.model_validate(
        {
            "school": school,
            "department": department,
            "reviews": [
                {
                    "reviewName": "review0",
                    "facultyType": "guide",
                    "components": [{"name": "abstract", "weight": 5}],
                    "deadline": {"from": "2025-01-01T00:00:00", "to": "2025-01-10T00:00:00"},
                },
                {
                    "reviewName": "review1",
                    "displayName": "Review 1",
                    "facultyType": "panel",
                    "components": [{"name": "presentation", "weight": 10}],
                    "deadline": {"from": "2025-02-01T00:00:00", "to": "2025-02-10T00:00:00"},
                },
                {
                    "reviewName": "review2",
                    "displayName": "Review 2",
                    "facultyType": "panel",
                    "components": [
                        {"name": "presentation", "weight": 10},
                        {"name": "content", "weight": 10},
                    ],
                    "deadline": {"from": "2025-03-01T00:00:00", "to": "2025-03-10T00:00:00"},
                    "requiresPPT": True,
                },
            ],
        }
    )
