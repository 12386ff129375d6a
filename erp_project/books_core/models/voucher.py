from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..classification import VoucherStatus, VoucherType
from ..managers import TenantManager
from .company import Company
from .item import Item
from .ledger import Ledger


class Voucher(models.Model):  # One recorded business event (sale, payment, ...)

    # Voucher belongs to one company (multi-tenant)
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    # human-readable, sequential per type (e.g. "SI-0001")
    number = models.CharField(max_length=32)
    voucher_type = models.CharField(max_length=20, choices=VoucherType.choices)
    date = models.DateField()

    # Optional counterparty (customer / supplier ledger)
    party = models.ForeignKey(
        Ledger,
        null=True,
        blank=True,
        # prevent deleting a ledger that still has vouchers
        on_delete=models.PROTECT,
        related_name="vouchers",
    )

    # Equals the sum of the voucher's journal debits (and credits)
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    # Settlement tracking for invoices
    amount_paid = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    narration = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=VoucherStatus.choices,
        default=VoucherStatus.PENDING,
    )
    """ Workflow:
        PENDING → PARTIALLY_PAID → PAID
        any → CANCELLED (soft delete, postings reversed) """

    # False once cancelled
    is_active = models.BooleanField(default=True)

    # Track user who created it
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "voucher_type"], name="voucher_company_type_idx"),
            models.Index(fields=["company", "date"], name="voucher_company_date_idx"),
        ]
        constraints = [
            # Within one company, each voucher number must be unique
            models.UniqueConstraint(
                fields=["company", "number"], name="uq_voucher_company_number"
            ),
            # At most one opening balance voucher per company, ever
            models.UniqueConstraint(
                fields=["company"],
                condition=models.Q(voucher_type="OPENING_BALANCE"),
                name="uq_company_opening_balance",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(total_amount__gte=0) &
                    models.Q(amount_paid__gte=0)
                ),
                name="voucher_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"{self.number} {self.date} [{self.status}]"

    @property
    def balance_amount(self):
        # unpaid part of the voucher
        return self.total_amount - self.amount_paid

    @property
    def is_cancelled(self):
        return self.status == VoucherStatus.CANCELLED

    # Aggregate all debit and credit amounts across voucher’s lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        aggs = self.journal_lines.aggregate(
            total_debit=models.Sum("debit"),
            total_credit=models.Sum("credit"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )

    # True if double-entry rule holds: total debits = total credits
    def is_balanced(self):
        debit, credit = self.compute_totals()
        return debit == credit

    def clean(self):
        # Party must come from the same tenant
        if self.party_id and self.party.company_id != self.company_id:
            raise ValidationError(
                "Voucher party must belong to the same company."
            )

    def save(self, *args, **kwargs):
        self.clean()
        return super().save(*args, **kwargs)


class VoucherItem(models.Model):  # One stock line on an item-bearing voucher

    voucher = models.ForeignKey(
        Voucher, on_delete=models.CASCADE, related_name="items"
    )
    item = models.ForeignKey(
        Item,
        # Prevent deleting item which has been invoiced
        on_delete=models.PROTECT,
    )
    # Core pricing logic: quantity × rate − discount = amount
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    rate = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    discount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(quantity__gt=0) &
                    models.Q(rate__gte=0) &
                    models.Q(discount__gte=0)
                ),
                name="voucher_item_positive_amounts",
            ),
        ]

    def __str__(self):
        return f"{self.voucher.number} - {self.item} x {self.quantity}"
