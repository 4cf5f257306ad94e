"""
Staff member model.

loan_balance is the one field outside the transfer engine that
a canonical workflow mutates directly: payroll decrements it by
the loan repayment withheld from a salary.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, BigInteger, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base


class StaffMember(Base):
    __tablename__ = "staff_members"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    salary: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    loan_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    loan_installment: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    joined_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<StaffMember {self.name} ({self.role})>"
