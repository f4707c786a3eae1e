"""
Read-only access to the four job-postings tables.

Knows column-level predicates (title, location, remote, salary present) but
nothing about which business question is being asked.
"""
from collections.abc import Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .. import config
from ..errors import InvalidFilter, NotFound
from ..models import Company, JobPosting, JobSkillLink, Skill
from ..schemas import PostingFilter, RemotePredicate


def validate_count(value, name: str, report_kind: str | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFilter(f"{name} must be an integer, got {value!r}.", report_kind=report_kind, parameter=name)
    if value < 0:
        raise InvalidFilter(f"{name} must not be negative, got {value}.", report_kind=report_kind, parameter=name)
    return value


def remote_clause(predicate: RemotePredicate, remote_location: str | None = None):
    if remote_location is None:
        remote_location = config.REMOTE_LOCATION
    location_match = JobPosting.job_location == remote_location
    flag_match = JobPosting.job_work_from_home.is_(True)
    if predicate == RemotePredicate.FLAG:
        return flag_match
    if predicate == RemotePredicate.EITHER:
        return or_(location_match, flag_match)
    return location_match


def posting_predicates(filters: PostingFilter) -> list:
    clauses = []
    if filters.title_category is not None:
        clauses.append(JobPosting.job_title_short == filters.title_category)
    if filters.location is not None:
        clauses.append(JobPosting.job_location == filters.location)
    if filters.remote:
        clauses.append(remote_clause(filters.remote_predicate))
    if filters.salary_present:
        clauses.append(JobPosting.salary_year_avg.is_not(None))
    return clauses


def fetch_postings(
    db: Session,
    filters: PostingFilter | None = None,
    limit: int | None = None,
    order_by_salary: bool = False,
) -> list[JobPosting]:
    stmt = select(JobPosting).where(*posting_predicates(filters or PostingFilter()))
    if order_by_salary:
        stmt = stmt.order_by(JobPosting.salary_year_avg.desc().nulls_last(), JobPosting.job_id)
    else:
        stmt = stmt.order_by(JobPosting.job_id)
    if limit is not None:
        stmt = stmt.limit(validate_count(limit, "limit"))
    return list(db.scalars(stmt).all())


def fetch_skills_for_postings(db: Session, posting_ids: Iterable[int]) -> dict[int, set[Skill]]:
    ids = list(dict.fromkeys(posting_ids))
    if not ids:
        return {}

    result: dict[int, set[Skill]] = {job_id: set() for job_id in ids}
    rows = db.execute(
        select(JobSkillLink.job_id, Skill)
        .join(Skill, Skill.skill_id == JobSkillLink.skill_id)
        .where(JobSkillLink.job_id.in_(ids))
    ).all()
    for job_id, skill in rows:
        result[job_id].add(skill)
    return result


def fetch_company(db: Session, company_id: int | None) -> Company | None:
    if company_id is None:
        return None
    return db.get(Company, company_id)


def get_posting(db: Session, job_id: int) -> JobPosting:
    posting = db.get(JobPosting, job_id)
    if posting is None:
        raise NotFound(f"Job posting {job_id} does not exist.", parameter="job_id")
    return posting


def get_skill(db: Session, skill_id: int) -> Skill:
    skill = db.get(Skill, skill_id)
    if skill is None:
        raise NotFound(f"Skill {skill_id} does not exist.", parameter="skill_id")
    return skill
