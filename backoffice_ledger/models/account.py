"""
Account model (chart of accounts).

Accounts carry a running balance. The balance column is only
ever changed through atomic increments issued by the store on
behalf of the transfer engine.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base
from backoffice_ledger.models.enums import AccountType


class Account(Base):
    """
    A named account such as the till or the business bank.

    Accounts are never deleted and their type never changes
    once created.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Account {self.id} ({self.type.value}) {self.balance}>"
