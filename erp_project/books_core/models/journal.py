from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import PostedLineManager, TenantManager
from .company import Company
from .ledger import Ledger
from .voucher import Voucher


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    One side of a posting: a debit or a credit against one ledger.
    Lines are written once, together with their voucher. Their amounts
    and ledger never change afterwards: the entry date follows the
    voucher when it is re-dated, and cancelling the voucher flags them
    `is_reversed`.
    """

    # Belongs to company & a voucher
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher = models.ForeignKey(
        Voucher,
        # postings outlive any attempt to delete the voucher
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    # Must point to one Ledger (can’t delete ledger if lines exist → PROTECT)
    ledger = models.ForeignKey(
        Ledger, on_delete=models.PROTECT, related_name="journal_lines"
    )

    # Exactly one of the pair is non-zero
    debit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    entry_date = models.DateField()
    narration = models.CharField(max_length=400, blank=True, default="")

    # Set when the voucher is cancelled; reversed lines drop out of balances
    is_reversed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    # Custom managers
    objects = TenantManager()  # Enforce tenant scoping
    posted = PostedLineManager()  # only lines that still count

    class Meta:
        # For fast queries like “all lines for this ledger up to a date”
        indexes = [
            models.Index(fields=["company", "ledger", "entry_date"],
                         name="jl_company_ledger_date_idx"),
            models.Index(fields=["company", "voucher"], name="jl_company_voucher_idx"),
        ]

        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(debit__gte=0) &
                    models.Q(credit__gte=0)
                ),
                name="jl_non_negative_amounts",
            ),
            # never neither
            models.CheckConstraint(
                condition=~(models.Q(debit=0) & models.Q(credit=0)),
                name="jl_debit_or_credit_nonzero",
            ),
            # never both
            models.CheckConstraint(
                condition=models.Q(debit=0) | models.Q(credit=0),
                name="jl_one_sided",
            ),
        ]

    # Show voucher, ledger, and amounts in debug logs
    def __str__(self):
        return f"{self.voucher_id} | {self.ledger_id} | D:{self.debit} C:{self.credit}"

    def clean(self):
        # Ensure no negative values sneak in
        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit and credit must be >= 0")
        if (self.debit > 0) and (self.credit > 0):
            raise ValidationError(
                "JournalLine should not have both debit and credit > 0"
            )
        if (self.debit == 0) and (self.credit == 0):
            raise ValidationError(
                "JournalLine requires a non-0 amount on either debit or credit"
            )

        # Every line must belong to same company as its voucher and ledger
        if self.voucher_id and self.voucher.company_id != self.company_id:
            raise ValidationError(
                "JournalLine.company must equal Voucher.company"
            )
        if self.ledger_id and self.ledger.company_id != self.company_id:
            raise ValidationError(
                "JournalLine.ledger must belong to the same company."
            )

    def save(self, *args, **kwargs):
        # Lines are immutable once written
        if self.pk:
            raise ValidationError(
                "Journal lines cannot be modified after posting."
            )
        if not getattr(self, "company_id", None) and self.voucher_id:
            self.company_id = self.voucher.company_id
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Journal lines cannot be deleted; cancel the voucher instead."
        )
