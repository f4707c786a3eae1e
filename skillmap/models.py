from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from .database import Base


class Company(Base):
    __tablename__ = "company_dim"

    company_id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=True)
    link = Column(Text, nullable=True)
    link_google = Column(Text, nullable=True)
    thumbnail = Column(Text, nullable=True)

    postings = relationship("JobPosting", back_populates="company")


class JobPosting(Base):
    __tablename__ = "job_postings_fact"

    job_id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("company_dim.company_id"), nullable=True, index=True)

    job_title_short = Column(Text, nullable=True, index=True)
    job_title = Column(Text, nullable=True)
    job_location = Column(Text, nullable=True, index=True)
    job_via = Column(Text, nullable=True)
    job_schedule_type = Column(Text, nullable=True)
    job_work_from_home = Column(Boolean, nullable=True)
    search_location = Column(Text, nullable=True)
    job_posted_date = Column(DateTime(timezone=False), nullable=True)
    job_no_degree_mention = Column(Boolean, nullable=True)
    job_health_insurance = Column(Boolean, nullable=True)
    job_country = Column(Text, nullable=True)

    salary_rate = Column(Text, nullable=True)
    salary_year_avg = Column(Float, nullable=True)  # null = not disclosed
    salary_hour_avg = Column(Float, nullable=True)

    company = relationship("Company", back_populates="postings")
    skill_links = relationship("JobSkillLink", back_populates="posting")


class Skill(Base):
    __tablename__ = "skills_dim"

    skill_id = Column(Integer, primary_key=True, index=True)
    skills = Column(Text, nullable=False)
    type = Column(Text, nullable=True)

    job_links = relationship("JobSkillLink", back_populates="skill")


class JobSkillLink(Base):
    __tablename__ = "skills_job_dim"

    job_id = Column(Integer, ForeignKey("job_postings_fact.job_id"), primary_key=True)
    skill_id = Column(Integer, ForeignKey("skills_dim.skill_id"), primary_key=True, index=True)

    posting = relationship("JobPosting", back_populates="skill_links")
    skill = relationship("Skill", back_populates="job_links")
