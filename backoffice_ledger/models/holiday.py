"""
Staff holiday model.

One row per staff member and calendar day; the date is kept as
its YYYY-MM-DD text so it compares the same in every store.
"""

from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base


class HolidayRecord(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        UniqueConstraint("staff_id", "date", name="uq_holidays_staff_date"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    staff_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("staff_members.id"), nullable=False, index=True
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)

    def __repr__(self) -> str:
        return f"<HolidayRecord {self.staff_id} {self.date}>"
