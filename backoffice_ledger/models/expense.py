"""
Expense helper models: saved templates and recurring expenses.

Neither holds money. They only pre-fill or schedule transfers.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, BigInteger, Boolean, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base
from backoffice_ledger.models.enums import Frequency


class ExpenseTemplate(Base):
    __tablename__ = "expense_templates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    from_account_id: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)


class RecurringExpense(Base):
    __tablename__ = "recurring_expenses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    frequency: Mapped[Frequency] = mapped_column(
        SAEnum(Frequency, name="frequency_enum"), nullable=False
    )
    from_account_id: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    last_generated: Mapped[int | None] = mapped_column(BigInteger)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
