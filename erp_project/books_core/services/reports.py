"""
Trial Balance, Profit & Loss, Balance Sheet and ledger statements.

Every figure goes through balances.signed_balance() / present();
no report carries its own sign rule.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import transaction
from django.db.models import Sum

from ..classification import (BS_ASSET_BUCKETS, BS_LIABILITY_BUCKETS,
                              PL_SECTIONS, Nature,
                              classifier as default_classifier)
from ..models import JournalLine, Ledger
from .balances import ZERO, Balance, posted_sums, present, signed_balance
from .ledgers import resolve_ledger

PROFIT = "PROFIT"
LOSS = "LOSS"


def _sum(values) -> Decimal:
    return sum(values, ZERO)


def _window_start(company, start):
    # period reports open at the financial year start unless told otherwise
    return start if start is not None else company.financial_year_start


# ---------- Report shapes ----------
@dataclass
class TrialBalanceRow:
    ledger_id: int
    code: str
    name: str
    group: str
    nature: str
    opening: Balance
    debit: Decimal
    credit: Decimal
    closing: Balance


@dataclass
class TrialBalance:
    start: Optional[date]
    end: Optional[date]
    rows: List[TrialBalanceRow] = field(default_factory=list)

    @property
    def opening_debit(self):
        return _sum(r.opening.debit for r in self.rows)

    @property
    def opening_credit(self):
        return _sum(r.opening.credit for r in self.rows)

    @property
    def period_debit(self):
        return _sum(r.debit for r in self.rows)

    @property
    def period_credit(self):
        return _sum(r.credit for r in self.rows)

    @property
    def closing_debit(self):
        return _sum(r.closing.debit for r in self.rows)

    @property
    def closing_credit(self):
        return _sum(r.closing.credit for r in self.rows)

    @property
    def opening_balanced(self):
        return self.opening_debit == self.opening_credit

    @property
    def period_balanced(self):
        return self.period_debit == self.period_credit

    @property
    def closing_balanced(self):
        return self.closing_debit == self.closing_credit

    @property
    def is_balanced(self):
        return (self.opening_balanced and self.period_balanced and
                self.closing_balanced)


@dataclass
class ReportLine:
    ledger_id: int
    code: str
    name: str
    group: str
    amount: Decimal  # positive on the section's natural side


@dataclass
class Section:
    lines: List[ReportLine] = field(default_factory=list)

    @property
    def total(self):
        return _sum(line.amount for line in self.lines)


@dataclass
class ProfitAndLoss:
    start: Optional[date]
    end: Optional[date]
    sections: Dict[str, Section]

    @property
    def direct_income(self):
        return self.sections["direct_income"].total

    @property
    def indirect_income(self):
        return self.sections["indirect_income"].total

    @property
    def direct_expenses(self):
        return self.sections["direct_expenses"].total

    @property
    def indirect_expenses(self):
        return self.sections["indirect_expenses"].total

    @property
    def total_income(self):
        return self.direct_income + self.indirect_income

    @property
    def total_expenses(self):
        return self.direct_expenses + self.indirect_expenses

    @property
    def gross_profit(self):
        return self.direct_income - self.direct_expenses

    @property
    def net_profit_or_loss(self):
        return self.total_income - self.total_expenses

    @property
    def result(self):
        return PROFIT if self.net_profit_or_loss >= 0 else LOSS


@dataclass
class BalanceSheet:
    as_of: Optional[date]
    assets: Dict[str, Section]
    liabilities: Dict[str, Section]
    # Net to date, income/expense ledger openings included (unlike the
    # period-only ProfitAndLoss figure). Signed: a loss is negative.
    net_profit_or_loss: Decimal

    @property
    def total_assets(self):
        return _sum(s.total for s in self.assets.values())

    @property
    def total_liabilities(self):
        return _sum(s.total for s in self.liabilities.values())

    @property
    def result(self):
        return PROFIT if self.net_profit_or_loss >= 0 else LOSS

    @property
    def difference(self):
        # non-zero means the postings are broken, not the report
        return self.total_assets - (
            self.total_liabilities + self.net_profit_or_loss)

    @property
    def is_balanced(self):
        return self.difference == 0


@dataclass
class StatementRow:
    date: date
    voucher_id: Optional[int]
    voucher_number: str
    voucher_type: str
    particulars: str
    narration: str
    debit: Decimal
    credit: Decimal
    balance: Balance


@dataclass
class LedgerStatement:
    ledger: Ledger
    start: Optional[date]
    end: Optional[date]
    opening: Balance
    rows: List[StatementRow] = field(default_factory=list)
    closing: Optional[Balance] = None

    @property
    def total_debit(self):
        return _sum(r.debit for r in self.rows)

    @property
    def total_credit(self):
        return _sum(r.credit for r in self.rows)


# ---------- helpers ----------
def _line(ledger, amount):
    return ReportLine(
        ledger_id=ledger.pk, code=ledger.code, name=ledger.name,
        group=ledger.group, amount=amount,
    )


def _bucketed(ledgers, buckets, amounts):
    """Place each ledger's non-zero amount into its group's bucket."""
    group_bucket = {g: key for key, groups in buckets.items() for g in groups}
    sections = {key: Section() for key in buckets}
    for ledger in ledgers:
        amount = amounts[ledger.pk]
        key = group_bucket.get(ledger.group)
        if key is not None and amount != 0:
            sections[key].lines.append(_line(ledger, amount))
    return sections


# ---------- Trial Balance ----------
def trial_balance(company, start=None, end=None,
                  classifier=default_classifier) -> TrialBalance:
    """
    Opening (brought forward to `start`), period movement and closing
    balance for every ledger. All line totals come from a single
    aggregate query, so the three columns share one view of the data.
    """
    start = _window_start(company, start)
    sums = posted_sums("period", start=start, end=end)
    if start:
        sums.update(posted_sums("before", before=start))
    ledgers = (Ledger.objects.for_company(company)
               .annotate(**sums).order_by("code"))

    report = TrialBalance(start=start, end=end)
    for ledger in ledgers:
        before_debit = getattr(ledger, "before_debit", None) or ZERO
        before_credit = getattr(ledger, "before_credit", None) or ZERO
        debit = ledger.period_debit or ZERO
        credit = ledger.period_credit or ZERO

        opening = signed_balance(ledger.nature, ledger.opening_balance,
                                 before_debit, before_credit,
                                 classifier=classifier)
        closing = signed_balance(ledger.nature, opening, debit, credit,
                                 classifier=classifier)

        # inactive ledgers are listed only while they still carry a figure
        if not ledger.is_active and not (opening or debit or credit):
            continue

        report.rows.append(TrialBalanceRow(
            ledger_id=ledger.pk,
            code=ledger.code,
            name=ledger.name,
            group=ledger.group,
            nature=ledger.nature,
            opening=present(ledger.nature, opening, classifier=classifier),
            debit=debit,
            credit=credit,
            closing=present(ledger.nature, closing, classifier=classifier),
        ))
    return report


# ---------- Profit & Loss ----------
def profit_and_loss(company, start=None, end=None,
                    classifier=default_classifier) -> ProfitAndLoss:
    """
    Period movement of income and expense ledgers. Income counts
    credit-positive and expenses debit-positive, which is exactly the
    signed balance of a zero-opening ledger of that nature.
    """
    start = _window_start(company, start)
    ledgers = list(
        Ledger.objects.for_company(company)
        .filter(nature__in=[Nature.INCOME, Nature.EXPENSE])
        .annotate(**posted_sums("period", start=start, end=end))
        .order_by("code")
    )
    amounts = {
        ledger.pk: signed_balance(
            ledger.nature, ZERO,
            ledger.period_debit or ZERO, ledger.period_credit or ZERO,
            classifier=classifier,
        )
        for ledger in ledgers
    }
    return ProfitAndLoss(
        start=start,
        end=end,
        sections=_bucketed(ledgers, PL_SECTIONS, amounts),
    )


# ---------- Balance Sheet ----------
def balance_sheet(company, as_of=None,
                  classifier=default_classifier) -> BalanceSheet:
    """
    Closing balances as of a date. Assets are debit-positive,
    liabilities and capital credit-positive; income and expense
    ledgers collapse into the net profit or loss to date.
    """
    ledgers = list(
        Ledger.objects.for_company(company)
        .annotate(**posted_sums("closing", end=as_of))
        .order_by("code")
    )
    amounts = {
        ledger.pk: signed_balance(
            ledger.nature, ledger.opening_balance,
            ledger.closing_debit or ZERO, ledger.closing_credit or ZERO,
            classifier=classifier,
        )
        for ledger in ledgers
    }

    by_nature = defaultdict(list)
    for ledger in ledgers:
        by_nature[ledger.nature].append(ledger)

    net = (_sum(amounts[lg.pk] for lg in by_nature[Nature.INCOME]) -
           _sum(amounts[lg.pk] for lg in by_nature[Nature.EXPENSE]))

    return BalanceSheet(
        as_of=as_of,
        assets=_bucketed(by_nature[Nature.ASSET], BS_ASSET_BUCKETS, amounts),
        liabilities=_bucketed(
            by_nature[Nature.LIABILITY] + by_nature[Nature.EQUITY],
            BS_LIABILITY_BUCKETS, amounts,
        ),
        net_profit_or_loss=net,
    )


# ---------- Ledger statement ----------
def _particulars(company, ledger, voucher_ids):
    """Names of the other ledgers on each voucher, opposite side first."""
    others = defaultdict(lambda: ([], []))
    lines = (JournalLine.posted.for_company(company)
             .filter(voucher_id__in=voucher_ids)
             .exclude(ledger=ledger)
             .select_related("ledger")
             .order_by("id"))
    for line in lines:
        debit_names, credit_names = others[line.voucher_id]
        target = debit_names if line.debit > 0 else credit_names
        if line.ledger.name not in target:
            target.append(line.ledger.name)
    return others


def ledger_statement(company, ledger, start=None, end=None,
                     classifier=default_classifier) -> LedgerStatement:
    """
    Chronological lines of one ledger with a running balance.

    The brought-forward total, the window's lines and their particulars
    are read inside one transaction. A fully consistent snapshot across
    the three reads needs REPEATABLE READ isolation on PostgreSQL.
    """
    start = _window_start(company, start)

    with transaction.atomic():
        ledger = resolve_ledger(company, ledger)
        nature = ledger.nature

        base = JournalLine.posted.for_company(company).filter(ledger=ledger)
        running = ledger.opening_balance
        if start:
            # brought forward
            before = base.filter(entry_date__lt=start).aggregate(
                debit=Sum("debit"), credit=Sum("credit"))
            running = signed_balance(nature, running,
                                     before["debit"] or ZERO,
                                     before["credit"] or ZERO,
                                     classifier=classifier)

        qs = base.select_related("voucher")
        if start:
            qs = qs.filter(entry_date__gte=start)
        if end:
            qs = qs.filter(entry_date__lte=end)
        lines = list(qs.order_by("entry_date", "id"))

        others = _particulars(company, ledger, {l.voucher_id for l in lines})

    statement = LedgerStatement(
        ledger=ledger, start=start, end=end,
        opening=present(nature, running, classifier=classifier),
    )
    for line in lines:
        debit_names, credit_names = others[line.voucher_id]
        # a debit here is "To" the credited ledgers, and vice versa
        names = credit_names if line.debit > 0 else debit_names
        running = signed_balance(nature, running, line.debit, line.credit,
                                 classifier=classifier)
        statement.rows.append(StatementRow(
            date=line.entry_date,
            voucher_id=line.voucher_id,
            voucher_number=line.voucher.number,
            voucher_type=line.voucher.voucher_type,
            particulars=", ".join(names),
            narration=line.narration,
            debit=line.debit,
            credit=line.credit,
            balance=present(nature, running, classifier=classifier),
        ))

    statement.closing = present(nature, running, classifier=classifier)
    return statement
