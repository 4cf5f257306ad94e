"""
Transaction model.

One row per transfer. Rows are append-only: the only column
ever updated after insert is is_settled, and only to True.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, BigInteger, Boolean, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    date: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    from_account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    to_account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)

    # IOU flag: False while the cash leg has not arrived yet
    is_settled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    # Counts toward payroll running totals (staff advances and clearings)
    is_posted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    due_date: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    contact_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    customer_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    staff_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    shift_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.from_account_id}->{self.to_account_id} "
            f"{self.amount} ({self.category})>"
        )
