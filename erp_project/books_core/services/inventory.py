import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from ..exceptions import InsufficientStock, InvalidAmount, ItemNotFound
from ..models import Item, StockMovement
from .amounts import MILLI, to_money, to_quantity

logger = logging.getLogger(__name__)


def resolve_item(company, ref, active_only=True):
    """Item of the company, by instance or primary key."""
    pk = ref.pk if isinstance(ref, Item) else ref
    qs = Item.objects.active(company) if active_only else Item.objects.for_company(company)
    try:
        return qs.get(pk=pk)
    except (Item.DoesNotExist, ValueError, TypeError):
        raise ItemNotFound(f"Item {pk!r} does not exist for this company.")


# ----------------------------
# Stock workflows
# ----------------------------
def adjust_stock(company, item, delta, voucher=None, rate=0, narration=""):
    """
    Move an item's stock by `delta` (positive adds, negative removes)
    and record the movement. Stock never goes below zero.
    Callers that post vouchers run this inside their own atomic unit.
    """
    try:
        delta = Decimal(str(delta)).quantize(MILLI)
    except ArithmeticError:
        raise InvalidAmount(f"Stock delta must be a number, got {delta!r}")
    if delta == 0:
        raise InvalidAmount("Stock delta cannot be zero")

    item = resolve_item(company, item, active_only=False)
    with transaction.atomic():
        # Lock the row so concurrent sales see each other's deductions
        item = Item.objects.select_for_update().get(pk=item.pk)

        if item.current_stock + delta < 0:
            raise InsufficientStock(
                f"Insufficient stock for {item.name}: "
                f"available {item.current_stock}, requested {-delta}"
            )
        item.current_stock += delta
        item.save(update_fields=["current_stock"])

        StockMovement.objects.create(
            company=item.company,
            item=item,
            voucher=voucher,
            quantity_in=delta if delta > 0 else Decimal("0"),
            quantity_out=-delta if delta < 0 else Decimal("0"),
            rate=to_money(rate, field="rate", allow_zero=True),
            narration=narration,
        )
    return item


def update_stock(company, item, quantity, direction):
    """Manual stock correction: direction is 'add' or 'subtract'."""
    quantity = to_quantity(quantity)
    if direction == "add":
        delta = quantity
    elif direction == "subtract":
        delta = -quantity
    else:
        raise ValidationError("Stock direction must be 'add' or 'subtract'.")

    item = adjust_stock(company, resolve_item(company, item), delta,
                        narration=f"Manual {direction}")
    logger.info("Manual stock %s of %s on item %s (company %s)",
                direction, quantity, item.code, company.pk)
    return item


def low_stock_items(company):
    """Active items at or below their reorder level, emptiest first."""
    return (Item.objects.active(company)
            .filter(current_stock__lte=F("min_stock_level"))
            .order_by("current_stock", "name"))
