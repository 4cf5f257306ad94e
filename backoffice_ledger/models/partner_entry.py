"""
Partner ledger entry model.

Sales made through the hiking-bar partner are tracked in their
own collection. An entry starts PENDING with a gross amount and
becomes RECONCILED once that amount has been allocated.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, BigInteger, JSON, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base
from backoffice_ledger.models.enums import PartnerEntryStatus


class PartnerEntry(Base):
    __tablename__ = "partner_entries"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[PartnerEntryStatus] = mapped_column(
        SAEnum(PartnerEntryStatus, name="partner_entry_status_enum"),
        nullable=False,
        default=PartnerEntryStatus.PENDING,
        index=True,
    )
    reconciled_at: Mapped[int | None] = mapped_column(BigInteger)
    reconciled_by: Mapped[str | None] = mapped_column(String(100))
    # {"cash": "...", "card": "...", "service_charge": "...", "contra": "..."}
    settlement_data: Mapped[dict | None] = mapped_column(JSON)

    def __repr__(self) -> str:
        return f"<PartnerEntry {self.id} {self.amount} ({self.status.value})>"
