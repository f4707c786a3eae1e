"""Shared fixtures: an in-memory job postings store and row factories."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from skillmap.database import Base
from skillmap.models import Company, JobPosting, JobSkillLink, Skill


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def add_company(db):
    def _add(company_id, name):
        company = Company(company_id=company_id, name=name)
        db.add(company)
        db.commit()
        return company

    return _add


@pytest.fixture
def add_skill(db):
    """Get-or-create a skill by name so postings can share skills."""

    def _add(name, skill_type="programming"):
        skill = db.query(Skill).filter(Skill.skills == name).first()
        if skill is None:
            next_id = (db.query(Skill).count() or 0) + 1
            skill = Skill(skill_id=next_id, skills=name, type=skill_type)
            db.add(skill)
            db.commit()
        return skill

    return _add


@pytest.fixture
def add_posting(db, add_skill):
    """Factory fixture for job postings with defaults for a remote Data Analyst role."""

    def _add(job_id, skills=(), **overrides):
        defaults = {
            "job_id": job_id,
            "company_id": None,
            "job_title_short": "Data Analyst",
            "job_title": f"Data Analyst {job_id}",
            "job_location": "Anywhere",
            "job_schedule_type": "Full-time",
            "job_work_from_home": True,
            "job_posted_date": datetime(2023, 3, 1, 9, 0, 0),
            "job_country": "United States",
            "salary_rate": "year",
            "salary_year_avg": 100000.0,
        }
        defaults.update(overrides)
        posting = JobPosting(**defaults)
        db.add(posting)
        db.commit()
        for name in skills:
            skill = add_skill(name)
            db.add(JobSkillLink(job_id=job_id, skill_id=skill.skill_id))
        db.commit()
        return posting

    return _add
