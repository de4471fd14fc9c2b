"""
Report model for the reportable transaction rows.

This module defines the SQLAlchemy model for report records. Rows are
inserted through the API and read in bulk for filtering and export; this
system never updates or deletes them.
"""

from enum import Enum as PyEnum

from sqlalchemy import Column, Date, Integer, Numeric, String

from app.models.base import Base


class ReportCategory(str, PyEnum):
    """Enumeration of report categories accepted on insert."""

    SALES = "Sales"
    HR = "HR"
    FINANCE = "Finance"


class Report(Base):
    """
    Report record model.

    One row of reportable transactional data.
    """

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    category = Column(String(50), nullable=False)  # Sales, HR, Finance
    amount = Column(Numeric(10, 2), nullable=False)
    user = Column(String(50), nullable=False)
    region = Column(String(50), nullable=False)

    def __repr__(self) -> str:
        """String representation of the Report model."""
        return (
            f"<Report(id={self.id}, date={self.date}, "
            f"category='{self.category}', amount={self.amount})>"
        )
