"""Investor pledges against approved funding applications."""

from enum import Enum

from sqlalchemy import Column, String, DateTime, Text, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from portal.db.base import Base, utcnow


class PledgeStatus(str, Enum):
    PLEDGED = "pledged"
    WITHDRAWN = "withdrawn"
    FULFILLED = "fulfilled"


class FundingPledge(Base):
    """
    Log entry for an investor's pledge. Pledges never change the
    application's approval status.
    """
    __tablename__ = "funding_pledges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    funding_id = Column(
        Integer,
        ForeignKey("funding_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pledger_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    note = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=PledgeStatus.PLEDGED.value)

    created_at = Column(DateTime, default=utcnow)

    funding = relationship("FundingApplication", back_populates="pledges")
    pledger = relationship("User")

    def __repr__(self) -> str:
        return f"<FundingPledge {self.amount} on funding {self.funding_id} [{self.status}]>"
