from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Q, Sum

from ..classification import Side, classifier as default_classifier, opposite
from ..models import JournalLine, Ledger

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Balance:
    """A non-negative amount labelled with the side it sits on."""
    amount: Decimal
    side: str

    @property
    def debit(self) -> Decimal:
        return self.amount if self.side == Side.DEBIT else ZERO

    @property
    def credit(self) -> Decimal:
        return self.amount if self.side == Side.CREDIT else ZERO


def _d(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x or "0"))


# ----------------------------
# The one balance formula
# ----------------------------
def signed_balance(nature, opening, debit_total, credit_total,
                   classifier=default_classifier) -> Decimal:
    """
    Balance in the nature's normal direction.

    movement = debits - credits
      credit-natured (LIABILITY, EQUITY, INCOME): opening - movement
      debit-natured (ASSET, EXPENSE):             opening + movement
    A negative result means the ledger has crossed to its opposite side.
    """
    movement = _d(debit_total) - _d(credit_total)
    if classifier.is_debit_natured(nature):
        return _d(opening) + movement
    return _d(opening) - movement


def present(nature, signed, classifier=default_classifier) -> Balance:
    """Label a signed balance with the side that makes it positive."""
    signed = _d(signed)
    normal = classifier.normal_side(nature)
    if signed >= 0:
        return Balance(amount=signed, side=normal)
    return Balance(amount=-signed, side=opposite(normal))


# ----------------------------
# Ledger closing balance
# ----------------------------
def line_totals(ledger: Ledger, as_of: Optional[date] = None,
                period_start: Optional[date] = None):
    """Sum of non-reversed debits and credits for one ledger in scope."""
    qs = JournalLine.posted.for_company(ledger.company_id).filter(ledger=ledger)
    if period_start:
        qs = qs.filter(entry_date__gte=period_start)
    if as_of:
        qs = qs.filter(entry_date__lte=as_of)

    agg = qs.aggregate(debit=Sum("debit"), credit=Sum("credit"))
    return agg["debit"] or ZERO, agg["credit"] or ZERO


def closing_balance(ledger: Ledger, as_of: Optional[date] = None,
                    period_start: Optional[date] = None,
                    classifier=default_classifier) -> Balance:
    """
    Closing balance of a ledger as (amount, side).

    With `period_start` only lines from that date count and the
    ledger's opening balance is still the starting point.
    """
    debit, credit = line_totals(ledger, as_of=as_of, period_start=period_start)
    signed = signed_balance(
        ledger.nature, ledger.opening_balance, debit, credit,
        classifier=classifier,
    )
    return present(ledger.nature, signed, classifier=classifier)


def posted_sums(prefix: str, start: Optional[date] = None,
                end: Optional[date] = None, before: Optional[date] = None):
    """
    Conditional Sum() expressions over a ledger's non-reversed lines,
    for use in Ledger.objects.annotate(...).
    """
    cond = Q(journal_lines__is_reversed=False)
    if start:
        cond &= Q(journal_lines__entry_date__gte=start)
    if end:
        cond &= Q(journal_lines__entry_date__lte=end)
    if before:
        cond &= Q(journal_lines__entry_date__lt=before)
    return {
        f"{prefix}_debit": Sum("journal_lines__debit", filter=cond),
        f"{prefix}_credit": Sum("journal_lines__credit", filter=cond),
    }
