"""
Named filters and the aggregate query shapes behind each report.

Every shape groups through the skills_job_dim bridge with an inner join, so a
skill with no qualifying postings is never emitted with a zero count.
"""
from collections.abc import Iterable

from sqlalchemy import Select, case, distinct, func, select

from .. import config
from ..errors import InvalidFilter
from ..models import Company, JobPosting, JobSkillLink, Skill
from ..schemas import PostingFilter, RemotePredicate
from ..utils.text_utils import best_match, normalize_key
from .schema_access import posting_predicates, remote_clause, validate_count


def validate_title_category(value: str | None, report_kind: str | None = None) -> str:
    categories = config.TITLE_CATEGORIES
    key = normalize_key(value)
    for category in categories:
        if normalize_key(category) == key:
            return category

    suggestion, _ = best_match(value, categories, threshold=0.6)
    message = f"Unknown title category {value!r}."
    if suggestion:
        message += f" Did you mean {suggestion!r}?"
    raise InvalidFilter(message, report_kind=report_kind, parameter="title_category")


def build_filters(
    title_category: str,
    location: str | None = None,
    remote: bool = False,
    remote_predicate: RemotePredicate | None = None,
    salary_present: bool = False,
    report_kind: str | None = None,
) -> PostingFilter:
    fields = {
        "title_category": validate_title_category(title_category, report_kind),
        "location": location,
        "remote": remote,
        "salary_present": salary_present,
    }
    if remote_predicate is not None:
        fields["remote_predicate"] = remote_predicate
    return PostingFilter(**fields)


def _skill_join(stmt: Select) -> Select:
    return stmt.join(JobSkillLink, JobSkillLink.job_id == JobPosting.job_id).join(
        Skill, Skill.skill_id == JobSkillLink.skill_id
    )


def top_paying_jobs_query(filters: PostingFilter, limit: int | None = config.DEFAULT_TOP_PAYING_LIMIT) -> Select:
    filters = filters.model_copy(update={"remote": True, "salary_present": True})
    stmt = (
        select(
            JobPosting.job_id,
            JobPosting.job_title,
            JobPosting.job_location,
            JobPosting.job_schedule_type,
            JobPosting.salary_year_avg,
            JobPosting.job_posted_date,
            Company.name.label("company_name"),
        )
        .outerjoin(Company, Company.company_id == JobPosting.company_id)
        .where(*posting_predicates(filters))
        .order_by(JobPosting.salary_year_avg.desc(), JobPosting.job_id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def skills_for_jobs_query(posting_ids: Iterable[int]) -> Select:
    ids = list(posting_ids)
    stmt = select(
        JobPosting.job_id,
        JobPosting.salary_year_avg,
        Skill.skill_id,
        Skill.skills.label("skill"),
    ).select_from(JobPosting)
    return (
        _skill_join(stmt)
        .where(JobPosting.job_id.in_(ids))
        .order_by(JobPosting.salary_year_avg.desc().nulls_last(), JobPosting.job_id, Skill.skills)
    )


def skill_demand_query(filters: PostingFilter, limit: int | None = config.DEFAULT_DEMAND_LIMIT) -> Select:
    demand_count = func.count(distinct(JobPosting.job_id)).label("demand_count")
    stmt = (
        _skill_join(select(Skill.skill_id, Skill.skills.label("skill"), demand_count).select_from(JobPosting))
        .where(*posting_predicates(filters))
        .group_by(Skill.skill_id, Skill.skills)
        .order_by(demand_count.desc(), Skill.skills, Skill.skill_id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def skill_salary_query(filters: PostingFilter, limit: int | None = config.DEFAULT_SALARY_LIMIT) -> Select:
    filters = filters.model_copy(update={"salary_present": True})
    avg_salary = func.avg(JobPosting.salary_year_avg).label("avg_salary")
    stmt = (
        _skill_join(select(Skill.skill_id, Skill.skills.label("skill"), avg_salary).select_from(JobPosting))
        .where(*posting_predicates(filters))
        .group_by(Skill.skill_id, Skill.skills)
        .order_by(avg_salary.desc(), Skill.skills, Skill.skill_id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def optimal_skills_query(
    filters: PostingFilter,
    min_demand: int = config.DEFAULT_MIN_DEMAND,
    limit: int | None = config.DEFAULT_OPTIMAL_LIMIT,
) -> Select:
    filters = filters.model_copy(update={"salary_present": True, "remote": True})
    demand_count = func.count(distinct(JobPosting.job_id)).label("demand_count")
    avg_salary = func.avg(JobPosting.salary_year_avg).label("avg_salary")
    stmt = (
        _skill_join(
            select(Skill.skill_id, Skill.skills.label("skill"), demand_count, avg_salary).select_from(JobPosting)
        )
        .where(*posting_predicates(filters))
        .group_by(Skill.skill_id, Skill.skills)
        .having(func.count(distinct(JobPosting.job_id)) > min_demand)
        .order_by(demand_count.desc(), avg_salary.desc(), Skill.skills, Skill.skill_id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def category_overview_query(remote_predicate: RemotePredicate, categories: list[str]) -> Select:
    return (
        select(
            JobPosting.job_title_short.label("title_category"),
            func.count(JobPosting.job_id).label("posting_count"),
            func.count(JobPosting.salary_year_avg).label("salaried_count"),
            func.sum(case((remote_clause(remote_predicate), 1), else_=0)).label("remote_count"),
        )
        .where(JobPosting.job_title_short.in_(categories))
        .group_by(JobPosting.job_title_short)
    )
