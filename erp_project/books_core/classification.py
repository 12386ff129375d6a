"""
Chart-of-accounts rules: ledger groups, natures and the
debit/credit side each nature grows on.

Everything here is a static lookup table built once at import.
Services receive an `AccountClassifier` (the module-level
`classifier` by default) instead of reading the tables directly.
"""
import re
from types import MappingProxyType

from django.db import models

from .exceptions import InvalidAccountGroup


# ---------- Enumerations ----------
class Nature(models.TextChoices):
    ASSET = "ASSET", "Asset"
    LIABILITY = "LIABILITY", "Liability"
    EQUITY = "EQUITY", "Equity"
    INCOME = "INCOME", "Income"
    EXPENSE = "EXPENSE", "Expense"


class Side(models.TextChoices):
    DEBIT = "DEBIT", "Debit"
    CREDIT = "CREDIT", "Credit"


class AccountGroup(models.TextChoices):
    # Assets
    ASSETS = "ASSETS", "Assets"
    CURRENT_ASSETS = "CURRENT_ASSETS", "Current Assets"
    FIXED_ASSETS = "FIXED_ASSETS", "Fixed Assets"
    INVESTMENTS = "INVESTMENTS", "Investments"
    LOANS_ASSETS = "LOANS_ASSETS", "Loans & Advances (Asset)"
    SUNDRY_DEBTORS = "SUNDRY_DEBTORS", "Sundry Debtors"
    CASH_IN_HAND = "CASH_IN_HAND", "Cash in Hand"
    BANK_ACCOUNTS = "BANK_ACCOUNTS", "Bank Accounts"
    # Liabilities
    LIABILITIES = "LIABILITIES", "Liabilities"
    CURRENT_LIABILITIES = "CURRENT_LIABILITIES", "Current Liabilities"
    LONG_TERM_LIABILITIES = "LONG_TERM_LIABILITIES", "Long Term Liabilities"
    LOANS_LIABILITY = "LOANS_LIABILITY", "Loans (Liability)"
    SUNDRY_CREDITORS = "SUNDRY_CREDITORS", "Sundry Creditors"
    DUTIES_TAXES = "DUTIES_TAXES", "Duties & Taxes"
    PROVISIONS = "PROVISIONS", "Provisions"
    # Equity
    CAPITAL = "CAPITAL", "Capital Account"
    RESERVES_SURPLUS = "RESERVES_SURPLUS", "Reserves & Surplus"
    # Income
    INCOME = "INCOME", "Income"
    SALES_ACCOUNTS = "SALES_ACCOUNTS", "Sales Accounts"
    DIRECT_INCOME = "DIRECT_INCOME", "Direct Income"
    INDIRECT_INCOME = "INDIRECT_INCOME", "Indirect Income"
    # Expenses
    EXPENSES = "EXPENSES", "Expenses"
    PURCHASE_ACCOUNTS = "PURCHASE_ACCOUNTS", "Purchase Accounts"
    DIRECT_EXPENSES = "DIRECT_EXPENSES", "Direct Expenses"
    INDIRECT_EXPENSES = "INDIRECT_EXPENSES", "Indirect Expenses"


class VoucherType(models.TextChoices):
    SALES_INVOICE = "SALES_INVOICE", "Sales Invoice"
    PURCHASE_INVOICE = "PURCHASE_INVOICE", "Purchase Invoice"
    PAYMENT = "PAYMENT", "Payment"
    RECEIPT = "RECEIPT", "Receipt"
    JOURNAL = "JOURNAL", "Journal"
    DEBIT_NOTE = "DEBIT_NOTE", "Debit Note"
    CREDIT_NOTE = "CREDIT_NOTE", "Credit Note"
    OPENING_BALANCE = "OPENING_BALANCE", "Opening Balance"


class VoucherStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PARTIALLY_PAID = "PARTIALLY_PAID", "Partially Paid"
    PAID = "PAID", "Paid"
    CANCELLED = "CANCELLED", "Cancelled"


# ---------- Lookup tables ----------
_A, _L, _E, _I, _X = (Nature.ASSET, Nature.LIABILITY, Nature.EQUITY,
                      Nature.INCOME, Nature.EXPENSE)

GROUP_NATURES = MappingProxyType({
    AccountGroup.ASSETS: _A,
    AccountGroup.CURRENT_ASSETS: _A,
    AccountGroup.FIXED_ASSETS: _A,
    AccountGroup.INVESTMENTS: _A,
    AccountGroup.LOANS_ASSETS: _A,
    AccountGroup.SUNDRY_DEBTORS: _A,
    AccountGroup.CASH_IN_HAND: _A,
    AccountGroup.BANK_ACCOUNTS: _A,
    AccountGroup.LIABILITIES: _L,
    AccountGroup.CURRENT_LIABILITIES: _L,
    AccountGroup.LONG_TERM_LIABILITIES: _L,
    AccountGroup.LOANS_LIABILITY: _L,
    AccountGroup.SUNDRY_CREDITORS: _L,
    AccountGroup.DUTIES_TAXES: _L,
    AccountGroup.PROVISIONS: _L,
    AccountGroup.CAPITAL: _E,
    AccountGroup.RESERVES_SURPLUS: _E,
    AccountGroup.INCOME: _I,
    AccountGroup.SALES_ACCOUNTS: _I,
    AccountGroup.DIRECT_INCOME: _I,
    AccountGroup.INDIRECT_INCOME: _I,
    AccountGroup.EXPENSES: _X,
    AccountGroup.PURCHASE_ACCOUNTS: _X,
    AccountGroup.DIRECT_EXPENSES: _X,
    AccountGroup.INDIRECT_EXPENSES: _X,
})

# Natures that grow on the debit side; everything else grows on credit
DEBIT_NATURES = frozenset({Nature.ASSET, Nature.EXPENSE})

# Human-readable voucher number prefixes: SI-0001, PI-0001, ...
VOUCHER_PREFIXES = MappingProxyType({
    VoucherType.SALES_INVOICE: "SI",
    VoucherType.PURCHASE_INVOICE: "PI",
    VoucherType.PAYMENT: "PV",
    VoucherType.RECEIPT: "RV",
    VoucherType.JOURNAL: "JV",
    VoucherType.DEBIT_NOTE: "DN",
    VoucherType.CREDIT_NOTE: "CN",
    VoucherType.OPENING_BALANCE: "OB",
})

# Vouchers that carry line items and move stock.
# +1 adds stock, -1 removes it.
STOCK_DIRECTION = MappingProxyType({
    VoucherType.SALES_INVOICE: -1,
    VoucherType.DEBIT_NOTE: -1,
    VoucherType.PURCHASE_INVOICE: 1,
    VoucherType.CREDIT_NOTE: 1,
})
ITEM_BEARING_TYPES = frozenset(STOCK_DIRECTION)

# Profit & Loss sections
PL_SECTIONS = MappingProxyType({
    "direct_income": (AccountGroup.SALES_ACCOUNTS, AccountGroup.DIRECT_INCOME),
    "indirect_income": (AccountGroup.INCOME, AccountGroup.INDIRECT_INCOME),
    "direct_expenses": (AccountGroup.PURCHASE_ACCOUNTS,
                        AccountGroup.DIRECT_EXPENSES),
    "indirect_expenses": (AccountGroup.EXPENSES,
                          AccountGroup.INDIRECT_EXPENSES),
})

# Balance Sheet buckets, every asset/liability/equity group lands in one
BS_ASSET_BUCKETS = MappingProxyType({
    "fixed_assets": (AccountGroup.FIXED_ASSETS,),
    "current_assets": (AccountGroup.CURRENT_ASSETS, AccountGroup.ASSETS,
                       AccountGroup.CASH_IN_HAND, AccountGroup.BANK_ACCOUNTS,
                       AccountGroup.SUNDRY_DEBTORS),
    "investments": (AccountGroup.INVESTMENTS,),
    "loans_assets": (AccountGroup.LOANS_ASSETS,),
})
BS_LIABILITY_BUCKETS = MappingProxyType({
    "capital": (AccountGroup.CAPITAL, AccountGroup.RESERVES_SURPLUS),
    "current_liabilities": (AccountGroup.CURRENT_LIABILITIES,
                            AccountGroup.LIABILITIES,
                            AccountGroup.SUNDRY_CREDITORS),
    "long_term_liabilities": (AccountGroup.LONG_TERM_LIABILITIES,
                              AccountGroup.LOANS_LIABILITY),
    "provisions": (AccountGroup.PROVISIONS, AccountGroup.DUTIES_TAXES),
})


# ---------- Classifier ----------
class AccountClassifier:
    """Maps a ledger group to its nature and a nature to its normal side."""

    def __init__(self, group_natures=GROUP_NATURES):
        self._group_natures = MappingProxyType(dict(group_natures))

    def classify(self, group) -> Nature:
        try:
            return Nature(self._group_natures[group])
        except (KeyError, TypeError, ValueError):
            # Unknown groups are rejected, never defaulted
            raise InvalidAccountGroup(f"Unknown ledger group: {group!r}")

    def normal_side(self, nature) -> Side:
        return Side.DEBIT if Nature(nature) in DEBIT_NATURES else Side.CREDIT

    def is_debit_natured(self, nature) -> bool:
        return self.normal_side(nature) == Side.DEBIT


def opposite(side) -> Side:
    return Side.CREDIT if side == Side.DEBIT else Side.DEBIT


def ledger_code(name: str) -> str:
    """'Cash in Hand' -> 'CASH_IN_HAND'"""
    return re.sub(r"\s+", "_", name.strip().upper())


# Default instance, injected wherever no other classifier is given
classifier = AccountClassifier()
