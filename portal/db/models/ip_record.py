"""Intellectual property record model."""

from sqlalchemy import Column, String, Text, Integer, JSON

from portal.db.base import Base
from portal.db.models.approval import ApprovableMixin


class IPRecord(ApprovableMixin, Base):
    """
    A patent, trademark, copyright or industrial design filing.

    status is a free-form progression (Submitted, Under Examination,
    Published, Granted, ...). identification_numbers holds the registry
    numbers that apply to ip_type.
    """
    __tablename__ = "ip_records"

    ip_type = Column(String(20), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    inventors = Column(Text, nullable=True)
    abstract = Column(Text, nullable=False)
    field = Column(String(255), nullable=True)
    trl = Column(Integer, nullable=True)  # Technology readiness level 1-9
    prior_art = Column(Text, nullable=True)

    status = Column(String(100), nullable=False, default="Submitted", index=True)
    identification_numbers = Column(JSON, nullable=False, default=dict)

    project_id = Column(Integer, nullable=True, index=True)
