import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd
from pydantic import BaseModel, ValidationError
from sqlalchemy import Select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from .. import config
from ..errors import ConnectionFailure, InvalidFilter
from ..schemas import (
    CategoryOverviewRow,
    OptimalSkillRow,
    ReportKind,
    ReportParams,
    SkillDemandRow,
    SkillFrequencyRow,
    SkillSalaryRow,
    TopPayingJobRow,
    TopPayingJobSkillRow,
)
from .query_builder import (
    build_filters,
    category_overview_query,
    optimal_skills_query,
    skill_demand_query,
    skill_salary_query,
    skills_for_jobs_query,
    top_paying_jobs_query,
    validate_count,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMITS: dict[ReportKind, int | None] = {
    ReportKind.TOP_PAYING_JOBS: config.DEFAULT_TOP_PAYING_LIMIT,
    ReportKind.TOP_PAYING_JOB_SKILLS: config.DEFAULT_TOP_PAYING_LIMIT,
    ReportKind.TOP_PAYING_SKILL_FREQUENCY: config.DEFAULT_TOP_PAYING_LIMIT,
    ReportKind.SKILL_DEMAND: config.DEFAULT_DEMAND_LIMIT,
    ReportKind.SKILL_SALARY: config.DEFAULT_SALARY_LIMIT,
    ReportKind.OPTIMAL_SKILLS: config.DEFAULT_OPTIMAL_LIMIT,
    ReportKind.DATASET_OVERVIEW: None,
}


def round_half_up(value: Any) -> int:
    """Round an average to a whole unit, .5 going up regardless of backend ROUND()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _none_if_missing(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _frame(db: Session, stmt: Select) -> pd.DataFrame:
    rows = db.execute(stmt).mappings().all()
    return pd.DataFrame([dict(r) for r in rows], columns=list(stmt.selected_columns.keys()))


def _filters(params: ReportParams, kind: ReportKind, remote: bool):
    return build_filters(
        params.title_category,
        location=params.location,
        remote=remote,
        remote_predicate=params.remote_predicate,
        report_kind=kind.value,
    )


def _top_paying_jobs(db: Session, params: ReportParams, limit: int) -> list[TopPayingJobRow]:
    filters = _filters(params, ReportKind.TOP_PAYING_JOBS, remote=True)
    rows = db.execute(top_paying_jobs_query(filters, limit)).mappings().all()
    return [TopPayingJobRow(**dict(r)) for r in rows]


def _top_paying_jobs_with_skills(db: Session, params: ReportParams, kind: ReportKind, limit: int) -> pd.DataFrame:
    """Stage 1 picks the top-paying postings, stage 2 joins their skills."""
    empty = pd.DataFrame(columns=["job_id", "job_title", "company_name", "salary_year_avg", "skill"])
    filters = _filters(params, kind, remote=True)
    jobs_df = _frame(db, top_paying_jobs_query(filters, limit))
    if jobs_df.empty:
        return empty

    skills_df = _frame(db, skills_for_jobs_query(jobs_df["job_id"].tolist()))
    if skills_df.empty:
        return empty
    merged = jobs_df[["job_id", "job_title", "company_name", "salary_year_avg"]].merge(
        skills_df[["job_id", "skill"]], on="job_id", how="inner"
    )
    return merged.sort_values(
        ["salary_year_avg", "job_id", "skill"], ascending=[False, True, True], kind="mergesort"
    )


def _top_paying_job_skills(db: Session, params: ReportParams, limit: int) -> list[TopPayingJobSkillRow]:
    merged = _top_paying_jobs_with_skills(db, params, ReportKind.TOP_PAYING_JOB_SKILLS, limit)
    return [
        TopPayingJobSkillRow(
            job_id=int(r["job_id"]),
            job_title=_none_if_missing(r["job_title"]),
            company_name=_none_if_missing(r["company_name"]),
            salary_year_avg=float(r["salary_year_avg"]),
            skill=str(r["skill"]),
        )
        for _, r in merged.iterrows()
    ]


def _top_paying_skill_frequency(db: Session, params: ReportParams, limit: int) -> list[SkillFrequencyRow]:
    merged = _top_paying_jobs_with_skills(db, params, ReportKind.TOP_PAYING_SKILL_FREQUENCY, limit)
    if merged.empty:
        return []

    counts = merged.groupby("skill")["job_id"].nunique().reset_index(name="job_count")
    counts = counts.sort_values(["job_count", "skill"], ascending=[False, True], kind="mergesort")
    return [SkillFrequencyRow(skill=str(r["skill"]), job_count=int(r["job_count"])) for _, r in counts.iterrows()]


def _skill_demand(db: Session, params: ReportParams, limit: int) -> list[SkillDemandRow]:
    filters = _filters(params, ReportKind.SKILL_DEMAND, remote=params.remote_only)
    rows = db.execute(skill_demand_query(filters, limit)).all()
    return [SkillDemandRow(skill=r.skill, demand_count=int(r.demand_count)) for r in rows]


def _skill_salary(db: Session, params: ReportParams, limit: int) -> list[SkillSalaryRow]:
    filters = _filters(params, ReportKind.SKILL_SALARY, remote=params.remote_only)
    rows = db.execute(skill_salary_query(filters, limit)).all()
    return [SkillSalaryRow(skill=r.skill, avg_salary=round_half_up(r.avg_salary)) for r in rows]


def _optimal_skills(db: Session, params: ReportParams, limit: int) -> list[OptimalSkillRow]:
    min_demand = validate_count(params.min_demand, "min_demand", ReportKind.OPTIMAL_SKILLS.value)
    filters = _filters(params, ReportKind.OPTIMAL_SKILLS, remote=True)
    rows = db.execute(optimal_skills_query(filters, min_demand, limit)).all()
    return [
        OptimalSkillRow(
            skill_id=int(r.skill_id),
            skill=r.skill,
            demand_count=int(r.demand_count),
            avg_salary=round_half_up(r.avg_salary),
        )
        for r in rows
    ]


def _dataset_overview(db: Session, params: ReportParams, limit: int | None) -> list[CategoryOverviewRow]:
    categories = list(config.TITLE_CATEGORIES)
    df = _frame(db, category_overview_query(params.remote_predicate, categories))
    df = (
        df.set_index("title_category")
        .reindex(pd.Index(categories, name="title_category"))
        .fillna(0)
        .reset_index()
    )
    if limit is not None:
        df = df.head(limit)
    return [
        CategoryOverviewRow(
            title_category=r["title_category"],
            posting_count=int(r["posting_count"]),
            salaried_count=int(r["salaried_count"]),
            remote_count=int(r["remote_count"]),
        )
        for _, r in df.iterrows()
    ]


_BUILDERS = {
    ReportKind.TOP_PAYING_JOBS: _top_paying_jobs,
    ReportKind.TOP_PAYING_JOB_SKILLS: _top_paying_job_skills,
    ReportKind.TOP_PAYING_SKILL_FREQUENCY: _top_paying_skill_frequency,
    ReportKind.SKILL_DEMAND: _skill_demand,
    ReportKind.SKILL_SALARY: _skill_salary,
    ReportKind.OPTIMAL_SKILLS: _optimal_skills,
    ReportKind.DATASET_OVERVIEW: _dataset_overview,
}


def _resolve_kind(kind: ReportKind | str) -> ReportKind:
    try:
        return ReportKind(kind)
    except ValueError as ex:
        raise InvalidFilter(f"Unknown report kind {kind!r}.", parameter="kind") from ex


def _resolve_params(params: ReportParams | dict[str, Any] | None, kind: ReportKind) -> ReportParams:
    if params is None:
        return ReportParams()
    if isinstance(params, ReportParams):
        return params
    try:
        return ReportParams.model_validate(params)
    except ValidationError as ex:
        first = ex.errors()[0]
        parameter = ".".join(str(p) for p in first.get("loc", ())) or None
        raise InvalidFilter(
            f"Invalid report parameters: {first.get('msg')}", report_kind=kind.value, parameter=parameter
        ) from ex


def build_report(
    db: Session,
    kind: ReportKind | str,
    params: ReportParams | dict[str, Any] | None = None,
) -> list[BaseModel]:
    """
    Run one report and return its ordered rows.

    Parameters are validated before any statement reaches the store. A store
    that cannot be reached surfaces as ConnectionFailure; empty results are
    returned as an empty list.
    """
    kind = _resolve_kind(kind)
    params = _resolve_params(params, kind)

    limit = params.limit if params.limit is not None else DEFAULT_LIMITS[kind]
    if limit is not None:
        validate_count(limit, "limit", kind.value)

    try:
        rows = _BUILDERS[kind](db, params, limit)
    except (OperationalError, InterfaceError) as ex:
        logger.error("Report %s failed, store unreachable: %s", kind.value, ex)
        raise ConnectionFailure(
            f"Could not reach the job postings store: {ex.orig or ex}", report_kind=kind.value
        ) from ex

    logger.info(
        "Built %s report for %r (limit=%s): %d rows",
        kind.value,
        params.title_category,
        limit,
        len(rows),
    )
    return rows


def report_to_records(rows: list[BaseModel]) -> list[dict[str, Any]]:
    return [row.model_dump() for row in rows]
