from decimal import Decimal

import django.db.models.deletion
import django.db.models.functions.text
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("financial_year_start", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "companies",
            },
        ),
        migrations.CreateModel(
            name="Ledger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=120)),
                ("name", models.CharField(max_length=200)),
                ("group", models.CharField(choices=[
                    ("ASSETS", "Assets"),
                    ("CURRENT_ASSETS", "Current Assets"),
                    ("FIXED_ASSETS", "Fixed Assets"),
                    ("INVESTMENTS", "Investments"),
                    ("LOANS_ASSETS", "Loans & Advances (Asset)"),
                    ("SUNDRY_DEBTORS", "Sundry Debtors"),
                    ("CASH_IN_HAND", "Cash in Hand"),
                    ("BANK_ACCOUNTS", "Bank Accounts"),
                    ("LIABILITIES", "Liabilities"),
                    ("CURRENT_LIABILITIES", "Current Liabilities"),
                    ("LONG_TERM_LIABILITIES", "Long Term Liabilities"),
                    ("LOANS_LIABILITY", "Loans (Liability)"),
                    ("SUNDRY_CREDITORS", "Sundry Creditors"),
                    ("DUTIES_TAXES", "Duties & Taxes"),
                    ("PROVISIONS", "Provisions"),
                    ("CAPITAL", "Capital Account"),
                    ("RESERVES_SURPLUS", "Reserves & Surplus"),
                    ("INCOME", "Income"),
                    ("SALES_ACCOUNTS", "Sales Accounts"),
                    ("DIRECT_INCOME", "Direct Income"),
                    ("INDIRECT_INCOME", "Indirect Income"),
                    ("EXPENSES", "Expenses"),
                    ("PURCHASE_ACCOUNTS", "Purchase Accounts"),
                    ("DIRECT_EXPENSES", "Direct Expenses"),
                    ("INDIRECT_EXPENSES", "Indirect Expenses"),
                ], max_length=32)),
                ("nature", models.CharField(choices=[
                    ("ASSET", "Asset"),
                    ("LIABILITY", "Liability"),
                    ("EQUITY", "Equity"),
                    ("INCOME", "Income"),
                    ("EXPENSE", "Expense"),
                ], max_length=10)),
                ("opening_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.TextField(blank=True, default="")),
                ("tax_id", models.CharField(blank=True, default="", max_length=32)),
                ("credit_limit", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("credit_days", models.PositiveIntegerField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledgers", to="books_core.company")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "nature"], name="ledger_company_nature_idx"),
                    models.Index(fields=["company", "group"], name="ledger_company_group_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uq_company_ledger_code"),
                    models.UniqueConstraint(
                        models.F("company"),
                        django.db.models.functions.text.Lower("name"),
                        name="uq_company_ledger_name_ci",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=80)),
                ("name", models.CharField(max_length=200)),
                ("unit", models.CharField(default="NOS", max_length=20)),
                ("opening_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("current_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("min_stock_level", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("purchase_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("selling_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "name"], name="item_company_name_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uq_company_item_code"),
                    models.CheckConstraint(condition=models.Q(current_stock__gte=0), name="item_stock_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[
                    ("owner", "Owner"),
                    ("admin", "Admin"),
                    ("accountant", "Accountant"),
                    ("viewer", "Viewer"),
                ], default="viewer", max_length=20)),
                ("is_default", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="books_core.company")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "user"], name="membership_company_user_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "company"), name="uq_user_company_membership"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=32)),
                ("voucher_type", models.CharField(choices=[
                    ("SALES_INVOICE", "Sales Invoice"),
                    ("PURCHASE_INVOICE", "Purchase Invoice"),
                    ("PAYMENT", "Payment"),
                    ("RECEIPT", "Receipt"),
                    ("JOURNAL", "Journal"),
                    ("DEBIT_NOTE", "Debit Note"),
                    ("CREDIT_NOTE", "Credit Note"),
                    ("OPENING_BALANCE", "Opening Balance"),
                ], max_length=20)),
                ("date", models.DateField()),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("narration", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[
                    ("PENDING", "Pending"),
                    ("PARTIALLY_PAID", "Partially Paid"),
                    ("PAID", "Paid"),
                    ("CANCELLED", "Cancelled"),
                ], default="PENDING", max_length=16)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("party", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="vouchers", to="books_core.ledger")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "voucher_type"], name="voucher_company_type_idx"),
                    models.Index(fields=["company", "date"], name="voucher_company_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "number"), name="uq_voucher_company_number"),
                    models.UniqueConstraint(
                        condition=models.Q(voucher_type="OPENING_BALANCE"),
                        fields=("company",),
                        name="uq_company_opening_balance",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=0) & models.Q(amount_paid__gte=0),
                        name="voucher_non_negative_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="books_core.item")),
                ("voucher", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="books_core.voucher")),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0) & models.Q(rate__gte=0) & models.Q(discount__gte=0),
                        name="voucher_item_positive_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity_in", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("quantity_out", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("narration", models.CharField(blank=True, default="", max_length=400)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="movements", to="books_core.item")),
                ("voucher", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="stock_movements", to="books_core.voucher")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "item"], name="stockmove_company_item_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity_in__gte=0) & models.Q(quantity_out__gte=0),
                        name="stock_movement_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("entry_date", models.DateField()),
                ("narration", models.CharField(blank=True, default="", max_length=400)),
                ("is_reversed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("ledger", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="books_core.ledger")),
                ("voucher", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="books_core.voucher")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "ledger", "entry_date"], name="jl_company_ledger_date_idx"),
                    models.Index(fields=["company", "voucher"], name="jl_company_voucher_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(debit__gte=0) & models.Q(credit__gte=0),
                        name="jl_non_negative_amounts",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(models.Q(debit=0), models.Q(credit=0), _negated=True),
                        name="jl_debit_or_credit_nonzero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(debit=0) | models.Q(credit=0),
                        name="jl_one_sided",
                    ),
                ],
            },
        ),
    ]
