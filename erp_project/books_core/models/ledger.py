from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Lower
from ..classification import AccountGroup, Nature, classifier, ledger_code
from ..exceptions import InvalidAccountGroup
from ..managers import TenantManager
from .company import Company


class Ledger(models.Model):
    """
    A named account in a company's chart of accounts.
    - code is derived from name and unique per company
    - group is chosen by the user; nature is derived from it
    - opening_balance is expressed in the nature's normal direction
    """

    company = models.ForeignKey(  # Each ledger belongs to one company
        Company,  # All reports must filter by company_id to prevent data leaks
        on_delete=models.CASCADE,
        related_name="ledgers",
    )
    # Derived from name: "Cash in Hand" → "CASH_IN_HAND"
    code = models.CharField(max_length=120)
    name = models.CharField(max_length=200)

    # Closed list of groups (Sundry Debtors, Sales Accounts, ...)
    group = models.CharField(max_length=32, choices=AccountGroup.choices)

    # Stored for fast report filtering, always classifier(group)
    nature = models.CharField(max_length=10, choices=Nature.choices)

    # Balance in the nature's normal direction when the ledger was opened
    opening_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # Optional contact / compliance fields for parties
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")
    tax_id = models.CharField(max_length=32, blank=True, default="")
    credit_limit = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )
    credit_days = models.PositiveIntegerField(null=True, blank=True)

    # “soft deactivate” ledgers (hide in UI, stop new postings)
    # without deleting history
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            # For reports grouped by nature / group
            models.Index(fields=["company", "nature"], name="ledger_company_nature_idx"),
            models.Index(fields=["company", "group"], name="ledger_company_group_idx"),
        ]
        """ Codes and names repeat across companies
            but must be unique within one (names case-insensitively). """
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"], name="uq_company_ledger_code"
            ),
            models.UniqueConstraint(
                models.F("company"), Lower("name"),
                name="uq_company_ledger_name_ci",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"  # Example: "CASH_IN_HAND – Cash in Hand"

    def clean(self):
        # classifier is authoritative, not user input
        try:
            expected = classifier.classify(self.group)
        except InvalidAccountGroup as exc:
            raise ValidationError({"group": str(exc)})
        if self.nature and self.nature != expected:
            raise ValidationError(
                {"nature": f"Group {self.group} requires nature {expected}."}
            )

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = ledger_code(self.name)
        if not self.nature:
            self.nature = classifier.classify(self.group)

        if self.pk:
            # nature is fixed for the ledger's lifetime
            old_nature = (
                Ledger.objects.filter(pk=self.pk)
                .values_list("nature", flat=True)
                .first()
            )
            if old_nature and old_nature != self.nature:
                raise ValidationError("A ledger's nature cannot change.")

        self.clean()
        return super().save(*args, **kwargs)

    @property
    def normal_side(self):
        return classifier.normal_side(self.nature)
