import datetime
import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from ..classification import (ITEM_BEARING_TYPES, STOCK_DIRECTION,
                              VOUCHER_PREFIXES, AccountGroup, VoucherStatus,
                              VoucherType)
from ..exceptions import (ForbiddenField, InvalidAmount, InvalidVoucherState,
                          InvalidVoucherType, MissingLineItems,
                          OpeningBalanceAlreadyExists, UnbalancedEntry,
                          UnknownAccount)
from ..models import Company, JournalLine, Ledger, Voucher, VoucherItem
from .amounts import CENT, to_money, to_quantity
from .inventory import adjust_stock, resolve_item
from .ledgers import get_or_create_ledger, resolve_ledger

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# Default accounts, created on first use
DEFAULT_CASH = ("Cash in Hand", AccountGroup.CASH_IN_HAND)
DEFAULT_SALES = ("Sales Account", AccountGroup.SALES_ACCOUNTS)
DEFAULT_PURCHASE = ("Purchase Account", AccountGroup.PURCHASE_ACCOUNTS)

# Keys accepted by create_voucher(); the company never comes from data
VOUCHER_FIELDS = frozenset({
    "voucher_type", "date", "total_amount", "party", "items", "entries",
    "debit_ledger", "credit_ledger", "cash_ledger", "narration",
})
ITEM_FIELDS = frozenset({"item", "quantity", "rate", "discount"})
ENTRY_FIELDS = frozenset({"ledger", "debit", "credit", "narration"})

PARTY_REQUIRED = frozenset({VoucherType.PAYMENT, VoucherType.RECEIPT})
ENTRY_BASED = frozenset({VoucherType.JOURNAL, VoucherType.OPENING_BALANCE})


def _reject_unused(voucher_type, *, total_amount, party, items, entries,
                   debit_ledger, credit_ledger, cash_ledger):
    """Arguments the voucher type would ignore are an error, not a no-op."""
    by_entries = (voucher_type == VoucherType.OPENING_BALANCE or
                  (voucher_type == VoucherType.JOURNAL and bool(entries)))
    unused = []
    if items and voucher_type not in ITEM_BEARING_TYPES:
        raise ForbiddenField(f"{voucher_type.label} does not carry line items.")
    if entries is not None and voucher_type not in ENTRY_BASED:
        unused.append("entries")
    if voucher_type != VoucherType.JOURNAL or by_entries:
        if debit_ledger is not None:
            unused.append("debit_ledger")
        if credit_ledger is not None:
            unused.append("credit_ledger")
    if voucher_type in ENTRY_BASED:
        if party is not None:
            unused.append("party")
        if cash_ledger is not None:
            unused.append("cash_ledger")
    elif (cash_ledger is not None and party is not None and
          voucher_type not in PARTY_REQUIRED):
        # the party is the counter-account, cash is never touched
        unused.append("cash_ledger")
    if by_entries and total_amount is not None:
        unused.append("total_amount")
    if unused:
        raise ForbiddenField(
            f"{voucher_type.label} does not use: {', '.join(unused)}."
        )


def _check_keys(payload, allowed, what):
    for key in payload:
        if key in ("company", "company_id"):
            raise ForbiddenField(
                "The company is taken from the session, not from data."
            )
        if key not in allowed:
            raise ForbiddenField(f"Field '{key}' is not accepted on {what}.")


def as_date(value):
    if value is None or value == "":
        return timezone.localdate()
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationError(f"Invalid voucher date: {value!r}")
    return parsed


def _postable(company, ref, role):
    ledger = resolve_ledger(company, ref)
    if not ledger.is_active:
        raise UnknownAccount(f"{role} ledger '{ledger.name}' is inactive.")
    return ledger


# ----------------------------
# Input parsing (no writes)
# ----------------------------
def _parse_items(company, items):
    """Resolve line items to (item, quantity, rate, discount, amount)."""
    parsed = []
    for raw in items:
        if not isinstance(raw, dict):
            raise MissingLineItems("Each line item must be a mapping.")
        _check_keys(raw, ITEM_FIELDS, "a line item")
        item = resolve_item(company, raw.get("item"))
        quantity = to_quantity(raw.get("quantity"))
        rate = to_money(raw.get("rate", 0), field="rate", allow_zero=True)
        discount = to_money(raw.get("discount", 0), field="discount",
                            allow_zero=True)
        # quantity × rate − discount = amount
        amount = (quantity * rate - discount).quantize(CENT)
        if amount <= 0:
            raise InvalidAmount(f"Line amount for {item.name} must be positive.")
        parsed.append((item, quantity, rate, discount, amount))
    return parsed


def _resolve_entries(company, entries):
    """First pass: every entry must name a ledger of this company."""
    resolved = []
    for raw in entries:
        if not isinstance(raw, dict):
            raise UnbalancedEntry("Each entry must be a mapping.")
        _check_keys(raw, ENTRY_FIELDS, "a journal entry")
        resolved.append((_postable(company, raw.get("ledger"), "Entry"), raw))
    return resolved


def _entry_lines(resolved, narration):
    """Second pass: one-sided amounts."""
    lines = []
    for ledger, raw in resolved:
        debit = to_money(raw.get("debit") or 0, field="debit", allow_zero=True)
        credit = to_money(raw.get("credit") or 0, field="credit",
                          allow_zero=True)
        if (debit > 0) == (credit > 0):
            raise UnbalancedEntry(
                f"Entry for '{ledger.name}' needs either a debit or a credit."
            )
        lines.append((ledger, debit, credit, raw.get("narration") or narration))
    return lines


def _rule_targets(voucher_type, party, cash):
    """(debit target, credit target) for the fixed posting rules."""
    counter = party or cash
    return {
        VoucherType.SALES_INVOICE: (counter, DEFAULT_SALES),
        VoucherType.PURCHASE_INVOICE: (DEFAULT_PURCHASE, counter),
        VoucherType.PAYMENT: (party, cash),
        VoucherType.RECEIPT: (cash, party),
        VoucherType.DEBIT_NOTE: (counter, DEFAULT_PURCHASE),
        VoucherType.CREDIT_NOTE: (DEFAULT_SALES, counter),
    }[voucher_type]


# ----------------------------
# Writes
# ----------------------------
def _ledger(company, target):
    if isinstance(target, Ledger):
        return target
    name, group = target
    return get_or_create_ledger(company, name, group)


def _create_numbered(company, voucher_type, **fields):
    """
    Insert the voucher with the next {prefix}-{NNNN} number for its type.
    The unique (company, number) constraint settles any collision; the
    insert then retries with the following number.
    """
    prefix = VOUCHER_PREFIXES[voucher_type]
    attempts = getattr(settings, "BOOKS_VOUCHER_NUMBER_ATTEMPTS", 5)
    count = (Voucher.objects.for_company(company)
             .filter(voucher_type=voucher_type).count())

    error = None
    for attempt in range(attempts):
        number = f"{prefix}-{count + 1 + attempt:04d}"
        try:
            with transaction.atomic():
                return Voucher.objects.create(
                    company=company,
                    voucher_type=voucher_type,
                    number=number,
                    **fields,
                )
        except IntegrityError as exc:
            if (voucher_type == VoucherType.OPENING_BALANCE and
                    Voucher.objects.for_company(company)
                    .filter(voucher_type=voucher_type).exists()):
                raise OpeningBalanceAlreadyExists()
            logger.warning("Voucher number %s taken for company %s, retrying",
                           number, company.pk)
            error = exc
    raise error


def _assert_balanced(voucher):
    # re-read from the database, not from what we meant to write
    debit, credit = voucher.compute_totals()
    if debit != credit or debit != voucher.total_amount:
        logger.error(
            "Voucher %s failed the write-time balance check: "
            "debit=%s credit=%s total=%s",
            voucher.number, debit, credit, voucher.total_amount,
        )
        raise UnbalancedEntry(
            f"Voucher {voucher.number} does not balance: "
            f"debit {debit}, credit {credit}, total {voucher.total_amount}"
        )


# ----------------------------
# Posting workflows
# ----------------------------
def post_voucher(company, voucher_type, *, date=None, total_amount=None,
                 party=None, items=None, entries=None, debit_ledger=None,
                 credit_ledger=None, cash_ledger=None, narration="",
                 user=None):
    """
    Turn one business event into a voucher and its balanced journal lines.

    Everything is checked before the first write, in this order:
    voucher type and the arguments it accepts, line items, ledger
    references, balance, and the one-opening-balance rule. The writes
    (default ledgers, voucher, items, stock movements, journal lines)
    form one atomic unit.
    """
    # (1) type
    try:
        voucher_type = VoucherType(voucher_type)
    except ValueError:
        raise InvalidVoucherType(f"Unknown voucher type: {voucher_type!r}")
    _reject_unused(voucher_type, total_amount=total_amount, party=party,
                   items=items, entries=entries, debit_ledger=debit_ledger,
                   credit_ledger=credit_ledger, cash_ledger=cash_ledger)
    date = as_date(date)
    narration = (narration or "").strip()

    # (2) line items
    parsed_items = []
    if voucher_type in ITEM_BEARING_TYPES:
        if items:
            parsed_items = _parse_items(company, items)
        elif total_amount is None:
            raise MissingLineItems(
                f"{voucher_type.label} needs line items or a total amount."
            )

    # (3) ledger references
    party = _postable(company, party, "Party") if party is not None else None
    cash = (_postable(company, cash_ledger, "Cash")
            if cash_ledger is not None else DEFAULT_CASH)
    resolved = []
    if voucher_type in PARTY_REQUIRED and party is None:
        raise UnknownAccount(f"{voucher_type.label} needs a party ledger.")
    if voucher_type == VoucherType.OPENING_BALANCE:
        resolved = _resolve_entries(company, entries or [])
    elif voucher_type == VoucherType.JOURNAL:
        if entries:
            resolved = _resolve_entries(company, entries)
        else:
            debit_ledger = _postable(company, debit_ledger, "Debit")
            credit_ledger = _postable(company, credit_ledger, "Credit")

    # (4) amounts and balance
    line_narration = narration or voucher_type.label
    if resolved or voucher_type == VoucherType.OPENING_BALANCE:
        lines = _entry_lines(resolved, line_narration)
        if len(lines) < 2:
            raise UnbalancedEntry(
                f"{voucher_type.label} needs at least two entries."
            )
    else:
        if parsed_items:
            total = sum((row[4] for row in parsed_items), ZERO)
            if (total_amount is not None and
                    to_money(total_amount, field="total_amount") != total):
                raise UnbalancedEntry(
                    f"Total amount {total_amount} does not match "
                    f"line items total {total}."
                )
        else:
            total = to_money(total_amount, field="total_amount")

        if voucher_type == VoucherType.JOURNAL:
            debit_target, credit_target = debit_ledger, credit_ledger
        else:
            debit_target, credit_target = _rule_targets(
                voucher_type, party, cash)
        lines = [
            (debit_target, total, ZERO, line_narration),
            (credit_target, ZERO, total, line_narration),
        ]

    total_debit = sum((line[1] for line in lines), ZERO)
    total_credit = sum((line[2] for line in lines), ZERO)
    if total_debit != total_credit:
        raise UnbalancedEntry(
            f"Debits {total_debit} do not equal credits {total_credit}."
        )

    # (5) opening balance singleton
    if voucher_type == VoucherType.OPENING_BALANCE:
        if (Voucher.objects.for_company(company)
                .filter(voucher_type=voucher_type).exists()):
            raise OpeningBalanceAlreadyExists()

    with transaction.atomic():
        # Serialize numbering per company (row lock on PostgreSQL)
        Company.objects.select_for_update().filter(pk=company.pk).first()

        voucher = _create_numbered(
            company,
            voucher_type,
            date=date,
            party=party,
            total_amount=total_debit,
            narration=narration,
            created_by=user,
        )

        direction = STOCK_DIRECTION.get(voucher_type)
        for item, quantity, rate, discount, amount in parsed_items:
            VoucherItem.objects.create(
                voucher=voucher, item=item, quantity=quantity,
                rate=rate, discount=discount, amount=amount,
            )
            # may raise InsufficientStock, which undoes the whole voucher
            adjust_stock(company, item, direction * quantity, voucher=voucher,
                         rate=rate, narration=voucher.number)

        for target, debit, credit, line_narr in lines:
            JournalLine.objects.create(
                company=company,
                voucher=voucher,
                ledger=_ledger(company, target),
                debit=debit,
                credit=credit,
                entry_date=date,
                narration=line_narr,
            )

        _assert_balanced(voucher)

    logger.info("Posted %s %s for %s (company %s)",
                voucher_type, voucher.number, voucher.total_amount, company.pk)
    return voucher


def create_voucher(company, data, user=None):
    """Dict entry point for post_voucher(); unknown keys are rejected."""
    _check_keys(data, VOUCHER_FIELDS, "a voucher")
    fields = dict(data)
    voucher_type = fields.pop("voucher_type", None)
    return post_voucher(company, voucher_type, user=user, **fields)


def create_opening_balance(company, entries, date=None, user=None):
    """The company's single OPENING_BALANCE voucher."""
    return post_voucher(
        company,
        VoucherType.OPENING_BALANCE,
        entries=entries,
        date=date,
        narration="Opening Balance",
        user=user,
    )


# ----------------------------
# Cancellation
# ----------------------------
def cancel_voucher(company, voucher):
    """
    Soft-delete a voucher: stock goes back, its journal lines stop
    counting, and the voucher is flagged CANCELLED. Cancelling twice
    is a no-op.
    """
    pk = voucher.pk if isinstance(voucher, Voucher) else voucher

    with transaction.atomic():
        # Lock the voucher row to avoid racing a second cancel
        voucher = (Voucher.objects.for_company(company)
                   .select_for_update().get(pk=pk))

        if voucher.voucher_type == VoucherType.OPENING_BALANCE:
            raise InvalidVoucherState(
                "The opening balance voucher cannot be cancelled."
            )
        if voucher.is_cancelled:
            return voucher

        for movement in list(voucher.stock_movements.all()):
            adjust_stock(company, movement.item_id, -movement.delta,
                         voucher=voucher, rate=movement.rate,
                         narration=f"Cancel {voucher.number}")

        # Lines are immutable; the reversal flag is the only thing that moves
        voucher.journal_lines.update(is_reversed=True)

        voucher.status = VoucherStatus.CANCELLED
        voucher.is_active = False
        voucher.save(update_fields=["status", "is_active"])

    logger.info("Cancelled voucher %s (company %s)", voucher.number, company.pk)
    return voucher
