"""
The initial chart of accounts and the well-known account ids
that workflows move money between.
"""

from decimal import Decimal

from backoffice_ledger.models.enums import AccountType
from backoffice_ledger.schemas.account import Account

TILL = "till_float"
BANK = "business_bank"
STAFF_CARD = "staff_card"
CARD_CLEARING = "mozzarella_card_payment"
PARTNER_RECEIVABLE = "hiking_bar_rec"
PARTNER_CARD_CLEARING = "hiking_bar_card_payment"
PENDING_BILLS = "pending_bills"
CUSTOMER_RECEIVABLES = "customer_receivables"
OPERATIONAL_EXPENSES = "operational_expenses"
PAYROLL_EXPENSES = "payroll_expenses"
STAFF_ADVANCES = "staff_advances_rec"
REVENUE = "service_fee_income"
FX_RESERVE = "foreign_currency_reserve"
EQUITY = "equity_adjustments"

CARD_CLEARING_ACCOUNTS = (CARD_CLEARING, PARTNER_CARD_CLEARING)
DEBT_DEPOSIT_ACCOUNTS = (BANK, TILL)

# Balances increase when money flows out of these types
CREDIT_NORMAL_TYPES = frozenset({AccountType.LIABILITY, AccountType.EQUITY})

INITIAL_ACCOUNTS: list[Account] = [
    Account(id=TILL, name="Register Cash (Till)", type=AccountType.ASSET,
            balance=Decimal("150"), icon="Wallet"),
    Account(id=BANK, name="Business Bank", type=AccountType.ASSET,
            balance=Decimal("5000"), icon="Building"),
    Account(id=STAFF_CARD, name="Staff Card", type=AccountType.LIABILITY,
            icon="CreditCard"),
    Account(id=CARD_CLEARING, name="Card Payments Clearing",
            type=AccountType.ASSET, icon="CreditCard"),
    Account(id=PARTNER_RECEIVABLE, name="Hiking Bar Receivable",
            type=AccountType.RECEIVABLE, icon="Handshake"),
    Account(id=PARTNER_CARD_CLEARING, name="Hiking Bar Card Payment",
            type=AccountType.ASSET, icon="SmartphoneNfc"),
    Account(id=PENDING_BILLS, name="Pending Bills (To Pay)",
            type=AccountType.LIABILITY, icon="FileText"),
    Account(id=CUSTOMER_RECEIVABLES, name="Bills to Receive (Customers)",
            type=AccountType.RECEIVABLE, icon="Users"),
    Account(id=OPERATIONAL_EXPENSES, name="Operational Expenses",
            type=AccountType.EXPENSE, icon="TrendingDown"),
    Account(id=PAYROLL_EXPENSES, name="Payroll & Salaries",
            type=AccountType.EXPENSE, icon="Users"),
    Account(id=STAFF_ADVANCES, name="Staff Advances",
            type=AccountType.RECEIVABLE, icon="History"),
    Account(id=REVENUE, name="Total Gross Sales (Revenue)",
            type=AccountType.REVENUE, icon="Zap"),
    Account(id=FX_RESERVE, name="Foreign Currency Reserve",
            type=AccountType.ASSET, icon="SmartphoneNfc"),
    Account(id=EQUITY, name="Equity & Adjustments", type=AccountType.EQUITY,
            icon="Scale"),
]
