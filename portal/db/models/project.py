"""Innovation project model."""

from sqlalchemy import Column, String, Text, Numeric

from portal.db.base import Base
from portal.db.models.approval import ApprovableMixin


class Project(ApprovableMixin, Base):
    """
    An innovation project submitted for review.

    project_status is the post-approval progression and is independent of
    approval_status.
    """
    __tablename__ = "projects"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    problem_statement = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    institution = Column(String(255), nullable=True)
    funding_needed = Column(Numeric(15, 2), nullable=True)

    project_status = Column(String(20), nullable=False, default="submitted", index=True)
