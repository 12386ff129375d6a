import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q

from ..classification import (AccountGroup, Nature, VoucherStatus,
                              classifier as default_classifier, ledger_code)
from ..exceptions import (AccountInUse, DuplicateAccount, ForbiddenField,
                          InvalidAccountGroup,
                          OpeningBalanceLockedAfterPostings, UnknownAccount)
from ..models import JournalLine, Ledger, Voucher
from .amounts import to_money
from .balances import posted_sums, present, signed_balance

logger = logging.getLogger(__name__)

# Starter chart created for every new company
SYSTEM_ACCOUNTS = (
    ("Cash in Hand", AccountGroup.CASH_IN_HAND),
    ("Capital Account", AccountGroup.CAPITAL),
    ("Opening Balance Adjustment", AccountGroup.CAPITAL),
)

# Contact / compliance fields a caller may set
DETAIL_FIELDS = frozenset({
    "phone", "email", "address", "tax_id", "credit_limit", "credit_days",
})
UPDATABLE_FIELDS = DETAIL_FIELDS | {"name", "group", "opening_balance"}


def _check_fields(payload, allowed):
    for key in payload:
        if key in ("company", "company_id"):
            raise ForbiddenField("The company is taken from the session, not from data.")
        if key not in allowed:
            raise ForbiddenField(f"Field '{key}' cannot be set on a ledger.")


def _clean_name(name):
    name = (name or "").strip()
    if not name:
        raise ValidationError("Ledger name is required.")
    return name


def _matching(company, name):
    # case-insensitive name or the code derived from it
    return Ledger.objects.for_company(company).filter(
        Q(name__iexact=name) | Q(code=ledger_code(name))
    )


def resolve_ledger(company, ref):
    """
    Return the company's ledger for an instance or primary key.
    Ledgers of other companies are reported as unknown.
    """
    if ref is None:
        raise UnknownAccount("A ledger reference is required.")
    pk = ref.pk if isinstance(ref, Ledger) else ref
    try:
        return Ledger.objects.for_company(company).get(pk=pk)
    except (Ledger.DoesNotExist, ValueError, TypeError):
        raise UnknownAccount(f"Ledger {pk!r} does not exist for this company.")


# ----------------------------
# Ledger creation
# ----------------------------
def create_ledger(company, name, group, opening_balance=0,
                  classifier=default_classifier, **details):
    """
    Create a ledger. The nature comes from the group, never from the caller;
    names are unique per company ignoring case, and so are derived codes.
    """
    _check_fields(details, DETAIL_FIELDS)
    name = _clean_name(name)
    nature = classifier.classify(group)
    opening = to_money(opening_balance, field="opening_balance",
                       allow_zero=True, allow_negative=True)

    if _matching(company, name).exists():
        raise DuplicateAccount(f"Ledger '{name}' already exists.")

    try:
        with transaction.atomic():
            ledger = Ledger.objects.create(
                company=company,
                name=name,
                group=group,
                nature=nature,
                opening_balance=opening,
                **details,
            )
    except IntegrityError:
        # lost a race against an identical create
        raise DuplicateAccount(f"Ledger '{name}' already exists.")

    logger.info("Created ledger %s (%s) for company %s",
                ledger.code, ledger.nature, company.pk)
    return ledger


def get_or_create_ledger(company, name, group, nature=None,
                         classifier=default_classifier):
    """
    Idempotent lookup-or-create used for default accounts.

    Safe under concurrent first use: the create runs in a savepoint and a
    unique-constraint violation turns into a second lookup.
    """
    expected = classifier.classify(group)
    if nature is not None:
        try:
            supplied = Nature(nature)
        except ValueError:
            raise InvalidAccountGroup(f"Unknown nature: {nature!r}")
        if supplied != expected:
            raise InvalidAccountGroup(
                f"Group {group} has nature {expected}, not {supplied}."
            )

    name = _clean_name(name)
    ledger = _matching(company, name).first()
    if ledger is None:
        try:
            with transaction.atomic():
                ledger = Ledger.objects.create(
                    company=company, name=name, group=group, nature=expected,
                )
            logger.info("Auto-created ledger %s for company %s",
                        ledger.code, company.pk)
            return ledger
        except IntegrityError:
            ledger = _matching(company, name).first()
            if ledger is None:
                raise

    if ledger.nature != expected:
        raise InvalidAccountGroup(
            f"Ledger '{ledger.name}' exists with nature {ledger.nature}, "
            f"expected {expected}."
        )
    if not ledger.is_active:
        ledger.is_active = True
        ledger.save(update_fields=["is_active"])
        logger.info("Re-activated ledger %s for company %s",
                    ledger.code, company.pk)
    return ledger


def provision_system_accounts(company, classifier=default_classifier):
    """Create the starter ledgers; running it again changes nothing."""
    with transaction.atomic():
        return [
            get_or_create_ledger(company, name, group, classifier=classifier)
            for name, group in SYSTEM_ACCOUNTS
        ]


# ----------------------------
# Ledger maintenance
# ----------------------------
def update_ledger(company, ledger, changes, classifier=default_classifier):
    """Apply an allow-listed set of changes to a ledger."""
    _check_fields(changes, UPDATABLE_FIELDS)

    with transaction.atomic():
        ledger = resolve_ledger(company, ledger)
        ledger = Ledger.objects.select_for_update().get(pk=ledger.pk)
        fields = []

        if "group" in changes:
            if classifier.classify(changes["group"]) != ledger.nature:
                raise InvalidAccountGroup(
                    f"Group {changes['group']} does not fit a "
                    f"{ledger.nature} ledger."
                )
            ledger.group = changes["group"]
            fields.append("group")

        if "name" in changes:
            name = _clean_name(changes["name"])
            clash = (Ledger.objects.for_company(company)
                     .filter(name__iexact=name).exclude(pk=ledger.pk))
            if clash.exists():
                raise DuplicateAccount(f"Ledger '{name}' already exists.")
            # the code stays as first derived
            ledger.name = name
            fields.append("name")

        if "opening_balance" in changes:
            opening = to_money(changes["opening_balance"],
                               field="opening_balance",
                               allow_zero=True, allow_negative=True)
            if opening != ledger.opening_balance:
                if JournalLine.objects.filter(ledger=ledger).exists():
                    raise OpeningBalanceLockedAfterPostings()
                ledger.opening_balance = opening
                fields.append("opening_balance")

        for key in DETAIL_FIELDS & set(changes):
            setattr(ledger, key, changes[key])
            fields.append(key)

        if fields:
            try:
                with transaction.atomic():
                    ledger.save(update_fields=fields)
            except IntegrityError:
                raise DuplicateAccount(f"Ledger '{ledger.name}' already exists.")
    return ledger


def deactivate_ledger(company, ledger):
    """Hide a ledger that nothing references. History is never deleted."""
    ledger = resolve_ledger(company, ledger)

    open_vouchers = (Voucher.objects.for_company(company)
                     .filter(party=ledger)
                     .exclude(status=VoucherStatus.CANCELLED))
    if open_vouchers.exists():
        raise AccountInUse(
            f"Ledger '{ledger.name}' is the party on active vouchers."
        )
    if JournalLine.posted.for_company(company).filter(ledger=ledger).exists():
        raise AccountInUse(f"Ledger '{ledger.name}' has posted journal lines.")

    if ledger.is_active:
        ledger.is_active = False
        ledger.save(update_fields=["is_active"])
        logger.info("Deactivated ledger %s for company %s",
                    ledger.code, company.pk)
    return ledger


def list_ledgers(company, group=None, classifier=default_classifier):
    """Active ledgers, each with its current closing `balance` attached."""
    qs = Ledger.objects.active(company)
    if group:
        classifier.classify(group)
        qs = qs.filter(group=group)
    qs = qs.annotate(**posted_sums("posted")).order_by("name")

    ledgers = list(qs)
    for ledger in ledgers:
        signed = signed_balance(
            ledger.nature, ledger.opening_balance,
            ledger.posted_debit or Decimal("0.00"),
            ledger.posted_credit or Decimal("0.00"),
            classifier=classifier,
        )
        ledger.balance = present(ledger.nature, signed, classifier=classifier)
    return ledgers
