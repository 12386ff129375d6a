from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .company import Company


# ---------- Items (stock-keeping products) ----------
class Item(models.Model):  # Represents something a company sells & purchases

    # Multi-tenant: each item belongs to a company
    company = models.ForeignKey(
        Company,
        # If the company is deleted, its items are deleted too (CASCADE)
        on_delete=models.CASCADE,
    )
    # Item code, unique per company
    code = models.CharField(max_length=80)

    # Required human-readable name of the item
    name = models.CharField(max_length=200)
    unit = models.CharField(max_length=20, default="NOS")

    # Stock levels
    opening_stock = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )
    current_stock = models.DecimalField(
        max_digits=14,
        decimal_places=3,  # Allow precise tracking
        default=Decimal("0"),
    )
    # Reorder level used by low stock listing
    min_stock_level = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )

    # store standard prices per product
    purchase_price = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    selling_price = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        # for fast lookups
        indexes = [
            models.Index(fields=["company", "name"], name="item_company_name_idx")
        ]

        constraints = [
            # Ensure each code is unique within a company
            models.UniqueConstraint(
                fields=["company", "code"], name="uq_company_item_code"
            ),
            # Stock can never go below zero
            models.CheckConstraint(
                condition=models.Q(current_stock__gte=0),
                name="item_stock_non_negative",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.current_stock is not None and self.current_stock < 0:
            raise ValidationError("Current stock cannot be negative.")

    def save(self, *args, **kwargs):
        # New items start with their opening stock on hand
        if not self.pk and not self.current_stock:
            self.current_stock = self.opening_stock
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


# ---------- Stock movements (inventory audit trail) ----------
class StockMovement(models.Model):
    """One in/out movement of an item, usually caused by a voucher line."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    item = models.ForeignKey(
        Item, on_delete=models.PROTECT, related_name="movements"
    )
    # Manual adjustments carry no voucher
    voucher = models.ForeignKey(
        "Voucher",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="stock_movements",
    )
    quantity_in = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )
    quantity_out = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )
    rate = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    narration = models.CharField(max_length=400, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "item"], name="stockmove_company_item_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(quantity_in__gte=0) &
                    models.Q(quantity_out__gte=0)
                ),
                name="stock_movement_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.item} +{self.quantity_in} -{self.quantity_out}"

    @property
    def delta(self):
        return self.quantity_in - self.quantity_out
