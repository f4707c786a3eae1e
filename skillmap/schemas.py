from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, StrictInt

from . import config


class RemotePredicate(str, Enum):
    LOCATION = "location"  # job_location equals the remote sentinel ("Anywhere")
    FLAG = "flag"  # job_work_from_home is true
    EITHER = "either"


def default_remote_predicate() -> RemotePredicate:
    return RemotePredicate(config.REMOTE_PREDICATE)


class ReportKind(str, Enum):
    TOP_PAYING_JOBS = "top_paying_jobs"
    TOP_PAYING_JOB_SKILLS = "top_paying_job_skills"
    TOP_PAYING_SKILL_FREQUENCY = "top_paying_skill_frequency"
    SKILL_DEMAND = "skill_demand"
    SKILL_SALARY = "skill_salary"
    OPTIMAL_SKILLS = "optimal_skills"
    DATASET_OVERVIEW = "dataset_overview"


class PostingFilter(BaseModel):
    """Predicate set understood by the schema access layer. None means "don't filter"."""

    title_category: str | None = None
    location: str | None = None
    remote: bool = False
    remote_predicate: RemotePredicate = Field(default_factory=default_remote_predicate)
    salary_present: bool = False


class ReportParams(BaseModel):
    title_category: str = "Data Analyst"
    limit: StrictInt | None = None  # None picks the report kind's default
    min_demand: StrictInt = config.DEFAULT_MIN_DEMAND
    remote_predicate: RemotePredicate = Field(default_factory=default_remote_predicate)
    remote_only: bool = False
    location: str | None = None


class TopPayingJobRow(BaseModel):
    job_id: int
    job_title: str | None
    job_location: str | None
    job_schedule_type: str | None
    salary_year_avg: float
    job_posted_date: datetime | None
    company_name: str | None


class TopPayingJobSkillRow(BaseModel):
    job_id: int
    job_title: str | None
    company_name: str | None
    salary_year_avg: float
    skill: str


class SkillFrequencyRow(BaseModel):
    skill: str
    job_count: int


class SkillDemandRow(BaseModel):
    skill: str
    demand_count: int


class SkillSalaryRow(BaseModel):
    skill: str
    avg_salary: int


class OptimalSkillRow(BaseModel):
    skill_id: int
    skill: str
    demand_count: int
    avg_salary: int


class CategoryOverviewRow(BaseModel):
    title_category: str
    posting_count: int
    salaried_count: int
    remote_count: int
