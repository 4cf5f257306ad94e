"""
Shift model.

A shift checkpoints the till balance when it opens and audits
it when it closes. The till account stays the source of truth
for cash at all times.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, BigInteger, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base
from backoffice_ledger.models.enums import ShiftStatus


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[ShiftStatus] = mapped_column(
        SAEnum(ShiftStatus, name="shift_status_enum"),
        nullable=False,
        default=ShiftStatus.OPEN,
        index=True,
    )
    # "OPEN" while the shift is open, NULL once closed. The unique
    # constraint allows at most one open shift at the data layer.
    open_slot: Mapped[str | None] = mapped_column(
        String(8), unique=True, nullable=True
    )
    opened_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    opened_by: Mapped[str] = mapped_column(String(100), nullable=False)
    opening_float: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    closed_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    closed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Closing snapshot
    total_sales: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    card_payments: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    credit_bills: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    credit_bill_customer_id: Mapped[str | None] = mapped_column(String(64))
    hiking_bar_sales: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    foreign_currency_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4)
    )
    foreign_currency_notes: Mapped[str | None] = mapped_column(String(255))
    local_cash_sales: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    till_debits: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    expected_cash: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    actual_cash: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    variance: Mapped[Decimal | None] = mapped_column(Numeric(19, 4))
    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Shift {self.id} ({self.status.value})>"
