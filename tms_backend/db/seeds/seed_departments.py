"""Seed the system training departments."""

import logging

from sqlalchemy.orm import Session

from tms_backend.models.department import Department

logger = logging.getLogger("tms")

SYSTEM_DEPARTMENTS = [
    {
        "code": "CCT",
        "name": "Cabin Crew Training Department",
        "description": "Training of cabin crew: safety procedures, emergency handling, first aid and service.",
    },
    {
        "code": "FCTD",
        "name": "Flight Crew Training Department",
        "description": "Pilot training, including simulator sessions, type rating and recurrent courses.",
    },
    {
        "code": "GAT",
        "name": "Ground Affairs Training Department",
        "description": "Training for check-in, gate and baggage service staff.",
    },
    {
        "code": "GOT",
        "name": "Ground Operations Training Department",
        "description": "Ramp operations: marshalling, stairs and baggage vehicles, loading procedures.",
    },
    {
        "code": "TAMT",
        "name": "Technical & Aircraft Maintenance Training Department",
        "description": "Maintenance, repair and overhaul training for engineers and mechanics.",
    },
    {
        "code": "SQA",
        "name": "Safety & Quality Assurance Department",
        "description": "Independent oversight auditing training programs and grading.",
    },
]


def seed_departments(db: Session) -> None:
    """Insert missing departments and refresh names/descriptions of existing ones."""
    created = updated = 0
    for data in SYSTEM_DEPARTMENTS:
        department = db.query(Department).filter(Department.code == data["code"]).first()
        if department is None:
            db.add(Department(**data, is_active=True))
            created += 1
        elif department.name != data["name"] or department.description != data["description"]:
            department.name = data["name"]
            department.description = data["description"]
            updated += 1
    db.commit()
    logger.info("Departments seeded: %d created, %d updated", created, updated)
