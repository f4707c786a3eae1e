"""Salary and demand reports over a job-postings dataset."""

__version__ = "1.0.0"
