import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from books_core.classification import AccountGroup, VoucherType
from books_core.models import Company, Item, Membership
from books_core.services import (create_ledger, create_opening_balance,
                                 get_or_create_ledger, post_voucher,
                                 trial_balance)

User = get_user_model()


class Command(BaseCommand):
    help = (
        "Create a demo company, a user, and a few posted vouchers for testing."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--company-name",  # Define flag
            default="Demo Company",
            help="Name of the demo company to create.",
        )
        parser.add_argument(
            "--username", default="demo", help="Username for the demo user."
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        # Read arguments from add_arguments()
        company_name = options["company_name"]
        username = options["username"]
        password = options["password"]

        # Generate unique slug for company
        def unique_slug_for_company(name, max_tries=100):
            # "Test Ltd" → "test-ltd", then "test-ltd-1", "test-ltd-2", ...
            base = slugify(name) or "company"
            slug = base
            i = 1
            while Company.objects.filter(slug=slug).exists():
                slug = f"{base}-{i}"
                i += 1
                if i > max_tries:
                    raise RuntimeError("Couldn't generate unique slug")
            return slug

        # 1. Create company (system ledgers are provisioned by a signal)
        company = Company.objects.create(
            name=company_name, slug=unique_slug_for_company(company_name)
        )
        self.stdout.write(self.style.SUCCESS(f"Created company: {company}"))

        # 2. Create user and make this their default company
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"email": f"{username}@example.com"},
        )
        if created:  # if user newly created
            user.set_password(password)
            user.save()
        Membership.objects.create(
            user=user,
            company=company,
            role="owner",
            is_default=not user.memberships.filter(is_default=True).exists(),
        )
        self.stdout.write(
            self.style.SUCCESS(f"Created user: {user.username} (pw={password})")
        )

        # 3. Parties and a stock item
        customer = create_ledger(company, "Acme Traders",
                                 AccountGroup.SUNDRY_DEBTORS)
        supplier = create_ledger(company, "Global Supplies",
                                 AccountGroup.SUNDRY_CREDITORS)
        rent = create_ledger(company, "Rent", AccountGroup.INDIRECT_EXPENSES)
        widget = Item.objects.create(
            company=company, code="WID-1", name="Widget",
            opening_stock=Decimal("0"), min_stock_level=Decimal("5"),
            purchase_price=Decimal("40.00"), selling_price=Decimal("60.00"),
        )
        self.stdout.write(self.style.SUCCESS("Created parties and items"))

        # 4. Opening balance: owner brings in cash
        cash = get_or_create_ledger(company, "Cash in Hand",
                                    AccountGroup.CASH_IN_HAND)
        capital = get_or_create_ledger(company, "Capital Account",
                                       AccountGroup.CAPITAL)
        today = datetime.date.today()
        create_opening_balance(company, [
            {"ledger": cash.pk, "debit": "10000.00"},
            {"ledger": capital.pk, "credit": "10000.00"},
        ], date=today, user=user)

        # 5. A few business events
        post_voucher(company, VoucherType.PURCHASE_INVOICE, date=today,
                     party=supplier,
                     items=[{"item": widget.pk, "quantity": "20",
                             "rate": "40.00"}], user=user)
        post_voucher(company, VoucherType.SALES_INVOICE, date=today,
                     party=customer,
                     items=[{"item": widget.pk, "quantity": "8",
                             "rate": "60.00"}], user=user)
        post_voucher(company, VoucherType.RECEIPT, date=today,
                     party=customer, total_amount="300.00", user=user)
        post_voucher(company, VoucherType.PAYMENT, date=today,
                     party=supplier, total_amount="500.00", user=user)
        post_voucher(company, VoucherType.JOURNAL, date=today,
                     debit_ledger=rent, credit_ledger=cash,
                     total_amount="1200.00", narration="Monthly rent",
                     user=user)
        self.stdout.write(self.style.SUCCESS("Posted demo vouchers"))

        tb = trial_balance(company)
        self.stdout.write(
            f"Trial balance: Dr {tb.closing_debit} / Cr {tb.closing_credit}"
        )
        self.stdout.write(self.style.SUCCESS("Demo tenant setup complete!"))
