import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum

from ..classification import VoucherStatus, VoucherType
from ..exceptions import ForbiddenField, InvalidVoucherState, InvalidVoucherType
from ..models import Voucher
from .amounts import to_money
from .posting import as_date

logger = logging.getLogger(__name__)

# Financial figures are locked once posted; only these may change
EDITABLE_FIELDS = frozenset({"narration", "date"})


def _locked(company, voucher):
    pk = voucher.pk if isinstance(voucher, Voucher) else voucher
    return Voucher.objects.for_company(company).select_for_update().get(pk=pk)


# ----------------------------
# Voucher edits
# ----------------------------
def update_voucher(company, voucher, changes):
    for key in changes:
        if key in ("company", "company_id"):
            raise ForbiddenField(
                "The company is taken from the session, not from data."
            )
        if key not in EDITABLE_FIELDS:
            raise ForbiddenField(f"Field '{key}' cannot be changed on a voucher.")

    with transaction.atomic():
        voucher = _locked(company, voucher)
        fields = []

        if "narration" in changes:
            voucher.narration = (changes["narration"] or "").strip()
            fields.append("narration")

        if "date" in changes:
            new_date = as_date(changes["date"])
            if new_date != voucher.date:
                voucher.date = new_date
                fields.append("date")
                # the one change posted lines take: their date follows
                # the voucher; amounts and ledgers stay as written
                voucher.journal_lines.update(entry_date=new_date)

        if fields:
            voucher.save(update_fields=fields)
    return voucher


def record_payment(company, voucher, amount):
    """Settle part (or all) of a voucher: PENDING → PARTIALLY_PAID → PAID."""
    amount = to_money(amount, field="amount")

    with transaction.atomic():
        # Lock the voucher row until the transaction finishes
        voucher = _locked(company, voucher)

        if voucher.is_cancelled:
            raise InvalidVoucherState(
                f"Voucher {voucher.number} is cancelled."
            )
        # Validation: prevent over-payment
        if voucher.amount_paid + amount > voucher.total_amount:
            raise InvalidVoucherState(
                f"Payment of {amount} exceeds the outstanding "
                f"{voucher.balance_amount} on {voucher.number}."
            )

        voucher.amount_paid += amount
        if voucher.balance_amount == 0:
            voucher.status = VoucherStatus.PAID
        else:
            voucher.status = VoucherStatus.PARTIALLY_PAID
        voucher.save(update_fields=["amount_paid", "status"])

    logger.info("Recorded payment of %s on %s (company %s)",
                amount, voucher.number, company.pk)
    return voucher


# ----------------------------
# Voucher listings
# ----------------------------
def list_vouchers(company, voucher_type=None, status=None,
                  start=None, end=None):
    """Active vouchers, newest first."""
    qs = (Voucher.objects.active(company)
          .select_related("party")
          .prefetch_related("items__item"))

    if voucher_type:
        try:
            qs = qs.filter(voucher_type=VoucherType(voucher_type))
        except ValueError:
            raise InvalidVoucherType(f"Unknown voucher type: {voucher_type!r}")
    if status:
        qs = qs.filter(status=status)
    if start:
        qs = qs.filter(date__gte=start)
    if end:
        qs = qs.filter(date__lte=end)
    return qs.order_by("-date", "-id")


def voucher_summary(company):
    """{voucher_type: {"count": n, "total": Decimal}} over active vouchers."""
    rows = (Voucher.objects.active(company)
            .values("voucher_type")
            .annotate(count=Count("id"), total=Sum("total_amount"))
            .order_by("voucher_type"))
    return {
        row["voucher_type"]: {
            "count": row["count"],
            "total": row["total"] or Decimal("0.00"),
        }
        for row in rows
    }
