"""Funding application model."""

from sqlalchemy import Column, String, Text, Numeric, Integer
from sqlalchemy.orm import relationship

from portal.db.base import Base
from portal.db.models.approval import ApprovableMixin


class FundingApplication(ApprovableMixin, Base):
    """
    A request for funding, optionally tied to a project.

    project_id is a weak reference: it is not a foreign key and deleting the
    project leaves the application untouched.
    """
    __tablename__ = "funding_applications"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    # Amounts
    amount = Column(Numeric(15, 2), nullable=False)
    amount_approved = Column(Numeric(15, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="TZS")
    grant_type = Column(String(50), nullable=False, default="research")

    project_id = Column(Integer, nullable=True, index=True)

    funding_status = Column(String(20), nullable=False, default="pending", index=True)

    pledges = relationship(
        "FundingPledge",
        back_populates="funding",
        cascade="all, delete-orphan",
        order_by="FundingPledge.created_at",
    )
