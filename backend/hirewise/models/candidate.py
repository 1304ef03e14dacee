"""
Candidate Model - the subset of the candidate record this service touches

Candidate lifecycle (creation, editing, deletion) belongs to the wider
recruiting system. Here the row is read for matching and written only
when a parsing job completes with extracted fields.
"""

import uuid

from sqlalchemy import Column, DateTime, JSON, String, Text
from sqlalchemy.sql import func

from hirewise.database import Base

# Columns a completed parsing job may write back
CANDIDATE_WRITABLE_FIELDS = frozenset({
    "name",
    "email",
    "phone",
    "current_role",
    "current_company",
    "location",
    "total_experience",
    "technical_skills",
    "summary",
    "file_url",
})


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(500), nullable=True)
    email = Column(String(500), nullable=True)
    phone = Column(String(100), nullable=True)
    current_role = Column(String(500), nullable=True)
    current_company = Column(String(500), nullable=True)
    location = Column(String(500), nullable=True)
    total_experience = Column(String(100), nullable=True)
    technical_skills = Column(JSON, nullable=False, default=list)
    summary = Column(Text, nullable=True)
    file_url = Column(String(2000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
