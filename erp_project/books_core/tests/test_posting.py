import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import Sum

from ..classification import AccountGroup, Side, VoucherStatus, VoucherType
from ..exceptions import (ForbiddenField, InsufficientStock, InvalidAmount,
                          InvalidVoucherType, ItemNotFound, MissingLineItems,
                          OpeningBalanceAlreadyExists, UnbalancedEntry,
                          UnknownAccount)
from ..models import (Company, Item, JournalLine, Ledger, StockMovement,
                      Voucher, VoucherItem)
from ..services import create_opening_balance, create_voucher, post_voucher
from ..services.balances import Balance
from ..services.posting import _assert_balanced
from .base import BooksTestCase


class CashSaleScenarioTests(BooksTestCase):
    def test_cash_sale_without_items_posts_one_balanced_pair(self):
        voucher = post_voucher(self.company, VoucherType.SALES_INVOICE,
                               date=self.today, total_amount="1180")

        self.assertEqual(voucher.number, "SI-0001")
        self.assertEqual(voucher.total_amount, Decimal("1180.00"))
        self.assertEqual(voucher.status, VoucherStatus.PENDING)

        sales = self.ledger_named("Sales Account")
        lines = list(voucher.journal_lines.order_by("id"))
        self.assertEqual(len(lines), 2)
        self.assertEqual((lines[0].ledger_id, lines[0].debit, lines[0].credit),
                         (self.cash.pk, Decimal("1180.00"), Decimal("0.00")))
        self.assertEqual((lines[1].ledger_id, lines[1].debit, lines[1].credit),
                         (sales.pk, Decimal("0.00"), Decimal("1180.00")))
        self.assertTrue(all(line.entry_date == self.today for line in lines))

        self.assertEqual(self.balance_of(sales),
                         Balance(Decimal("1180.00"), Side.CREDIT))
        self.assertEqual(self.balance_of(self.cash),
                         Balance(Decimal("1180.00"), Side.DEBIT))

    def test_default_accounts_are_created_once(self):
        for _ in range(3):
            post_voucher(self.company, VoucherType.SALES_INVOICE,
                         date=self.today, total_amount="10")
        self.assertEqual(
            Ledger.objects.filter(company=self.company,
                                  name="Sales Account").count(),
            1,
        )


class NumberingTests(BooksTestCase):
    def test_numbers_are_sequential_per_type(self):
        numbers = [
            post_voucher(self.company, VoucherType.SALES_INVOICE,
                         date=self.today, total_amount="10").number,
            post_voucher(self.company, VoucherType.SALES_INVOICE,
                         date=self.today, total_amount="10").number,
            post_voucher(self.company, VoucherType.PURCHASE_INVOICE,
                         date=self.today, total_amount="10").number,
        ]
        self.assertEqual(numbers, ["SI-0001", "SI-0002", "PI-0001"])

    def test_numbers_restart_per_company(self):
        other = Company.objects.create(name="Other", slug="other")
        post_voucher(self.company, VoucherType.RECEIPT, date=self.today,
                     party=self.make_ledger("Acme"), total_amount="5")
        voucher = post_voucher(other, VoucherType.RECEIPT, date=self.today,
                               party=self.make_ledger("Acme", company=other),
                               total_amount="5")
        self.assertEqual(voucher.number, "RV-0001")

    def test_taken_number_is_skipped(self):
        # a number already in use (e.g. written by a concurrent worker)
        Voucher.objects.create(company=self.company, number="JV-0001",
                               voucher_type=VoucherType.PAYMENT,
                               date=self.today)
        rent = self.make_ledger("Rent", AccountGroup.INDIRECT_EXPENSES)
        voucher = post_voucher(self.company, VoucherType.JOURNAL,
                               date=self.today, debit_ledger=rent,
                               credit_ledger=self.cash, total_amount="50")
        self.assertEqual(voucher.number, "JV-0002")


class PostingRuleTests(BooksTestCase):
    def setUp(self):
        super().setUp()
        self.customer = self.make_ledger("Acme", AccountGroup.SUNDRY_DEBTORS)
        self.supplier = self.make_ledger("Globex",
                                         AccountGroup.SUNDRY_CREDITORS)
        self.bank = self.make_ledger("City Bank", AccountGroup.BANK_ACCOUNTS)

    def pairs(self, voucher):
        """[(ledger name, debit, credit)] in posting order"""
        return [
            (line.ledger.name, line.debit, line.credit)
            for line in voucher.journal_lines.select_related("ledger")
            .order_by("id")
        ]

    def test_credit_sale_debits_the_customer(self):
        voucher = post_voucher(self.company, VoucherType.SALES_INVOICE,
                               date=self.today, party=self.customer,
                               total_amount="500")
        self.assertEqual(voucher.party_id, self.customer.pk)
        self.assertEqual(self.pairs(voucher), [
            ("Acme", Decimal("500.00"), Decimal("0.00")),
            ("Sales Account", Decimal("0.00"), Decimal("500.00")),
        ])

    def test_credit_purchase_credits_the_supplier(self):
        voucher = post_voucher(self.company, VoucherType.PURCHASE_INVOICE,
                               date=self.today, party=self.supplier,
                               total_amount="300")
        self.assertEqual(self.pairs(voucher), [
            ("Purchase Account", Decimal("300.00"), Decimal("0.00")),
            ("Globex", Decimal("0.00"), Decimal("300.00")),
        ])

    def test_payment_and_receipt(self):
        payment = post_voucher(self.company, VoucherType.PAYMENT,
                               date=self.today, party=self.supplier,
                               total_amount="120")
        receipt = post_voucher(self.company, VoucherType.RECEIPT,
                               date=self.today, party=self.customer,
                               cash_ledger=self.bank, total_amount="80")
        self.assertEqual(payment.number, "PV-0001")
        self.assertEqual(self.pairs(payment), [
            ("Globex", Decimal("120.00"), Decimal("0.00")),
            ("Cash in Hand", Decimal("0.00"), Decimal("120.00")),
        ])
        self.assertEqual(receipt.number, "RV-0001")
        self.assertEqual(self.pairs(receipt), [
            ("City Bank", Decimal("80.00"), Decimal("0.00")),
            ("Acme", Decimal("0.00"), Decimal("80.00")),
        ])

    def test_payment_needs_a_party(self):
        with self.assertRaises(UnknownAccount):
            post_voucher(self.company, VoucherType.PAYMENT, date=self.today,
                         total_amount="120")

    def test_debit_and_credit_notes(self):
        debit_note = post_voucher(self.company, VoucherType.DEBIT_NOTE,
                                  date=self.today, party=self.supplier,
                                  total_amount="40")
        credit_note = post_voucher(self.company, VoucherType.CREDIT_NOTE,
                                   date=self.today, party=self.customer,
                                   total_amount="60")
        self.assertEqual(debit_note.number, "DN-0001")
        self.assertEqual(self.pairs(debit_note), [
            ("Globex", Decimal("40.00"), Decimal("0.00")),
            ("Purchase Account", Decimal("0.00"), Decimal("40.00")),
        ])
        self.assertEqual(credit_note.number, "CN-0001")
        self.assertEqual(self.pairs(credit_note), [
            ("Sales Account", Decimal("60.00"), Decimal("0.00")),
            ("Acme", Decimal("0.00"), Decimal("60.00")),
        ])

    def test_journal_shortcut(self):
        rent = self.make_ledger("Rent", AccountGroup.INDIRECT_EXPENSES)
        voucher = post_voucher(self.company, VoucherType.JOURNAL,
                               date=self.today, debit_ledger=rent.pk,
                               credit_ledger=self.bank.pk, total_amount="300",
                               narration="Office rent")
        self.assertEqual(self.pairs(voucher), [
            ("Rent", Decimal("300.00"), Decimal("0.00")),
            ("City Bank", Decimal("0.00"), Decimal("300.00")),
        ])
        self.assertEqual(
            set(voucher.journal_lines.values_list("narration", flat=True)),
            {"Office rent"},
        )

    def test_multi_line_journal(self):
        rent = self.make_ledger("Rent", AccountGroup.INDIRECT_EXPENSES)
        power = self.make_ledger("Power", AccountGroup.INDIRECT_EXPENSES)
        voucher = post_voucher(self.company, VoucherType.JOURNAL,
                               date=self.today, entries=[
                                   {"ledger": rent.pk, "debit": "100.10"},
                                   {"ledger": power.pk, "debit": "49.95"},
                                   {"ledger": self.bank.pk, "credit": "150.05",
                                    "narration": "Bank transfer"},
                               ])
        self.assertEqual(voucher.total_amount, Decimal("150.05"))
        self.assertTrue(voucher.is_balanced())

    def test_every_posted_voucher_balances_to_the_cent(self):
        item = self.make_item(stock="100")
        rent = self.make_ledger("Rent", AccountGroup.INDIRECT_EXPENSES)
        post_voucher(self.company, "SALES_INVOICE", date=self.today,
                     items=[{"item": item.pk, "quantity": "3",
                             "rate": "33.33", "discount": "0.01"}])
        post_voucher(self.company, "PURCHASE_INVOICE", date=self.today,
                     party=self.supplier, total_amount="0.07")
        post_voucher(self.company, "PAYMENT", date=self.today,
                     party=self.supplier, total_amount="0.05")
        post_voucher(self.company, "RECEIPT", date=self.today,
                     party=self.customer, total_amount="19.99")
        post_voucher(self.company, "JOURNAL", date=self.today,
                     entries=[{"ledger": rent.pk, "debit": "0.10"},
                              {"ledger": rent.pk, "debit": "0.20"},
                              {"ledger": self.bank.pk, "credit": "0.30"}])
        post_voucher(self.company, "DEBIT_NOTE", date=self.today,
                     items=[{"item": item.pk, "quantity": "1", "rate": "5"}])
        post_voucher(self.company, "CREDIT_NOTE", date=self.today,
                     party=self.customer, total_amount="1.01")
        create_opening_balance(self.company, [
            {"ledger": self.bank.pk, "debit": "1000"},
            {"ledger": self.capital.pk, "credit": "1000"},
        ], date=self.today)

        vouchers = Voucher.objects.filter(company=self.company)
        self.assertEqual(vouchers.count(), 8)
        for voucher in vouchers:
            totals = voucher.journal_lines.aggregate(d=Sum("debit"),
                                                     c=Sum("credit"))
            self.assertEqual(totals["d"], totals["c"], voucher.number)
            self.assertEqual(totals["d"], voucher.total_amount, voucher.number)


class InventoryPostingTests(BooksTestCase):
    def setUp(self):
        super().setUp()
        self.widget = self.make_item("WID", stock="10")
        self.gadget = self.make_item("GAD", stock="5")

    def test_sale_with_items_reduces_stock(self):
        voucher = post_voucher(self.company, VoucherType.SALES_INVOICE,
                               date=self.today, items=[
                                   {"item": self.widget.pk, "quantity": "4",
                                    "rate": "25.00", "discount": "10"},
                                   {"item": self.gadget.pk, "quantity": "1",
                                    "rate": "100"},
                               ])
        # 4 × 25 − 10 + 1 × 100
        self.assertEqual(voucher.total_amount, Decimal("190.00"))
        self.assertEqual(
            list(voucher.items.order_by("id").values_list("amount", flat=True)),
            [Decimal("90.00"), Decimal("100.00")],
        )
        self.widget.refresh_from_db()
        self.gadget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("6"))
        self.assertEqual(self.gadget.current_stock, Decimal("4"))
        self.assertEqual(voucher.stock_movements.count(), 2)

    def test_purchase_and_credit_note_add_stock(self):
        post_voucher(self.company, VoucherType.PURCHASE_INVOICE,
                     date=self.today,
                     items=[{"item": self.widget.pk, "quantity": "5",
                             "rate": "20"}])
        post_voucher(self.company, VoucherType.CREDIT_NOTE, date=self.today,
                     items=[{"item": self.widget.pk, "quantity": "1",
                             "rate": "25"}])
        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("16"))

    def test_debit_note_removes_stock(self):
        post_voucher(self.company, VoucherType.DEBIT_NOTE, date=self.today,
                     items=[{"item": self.widget.pk, "quantity": "2",
                             "rate": "20"}])
        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("8"))

    def test_shortage_rolls_back_everything(self):
        before = self.snapshot()
        with self.assertRaises(InsufficientStock):
            # the first line alone would succeed
            post_voucher(self.company, VoucherType.SALES_INVOICE,
                         date=self.today, items=[
                             {"item": self.widget.pk, "quantity": "1",
                              "rate": "10"},
                             {"item": self.gadget.pk, "quantity": "6",
                              "rate": "10"},
                         ])
        self.assertEqual(self.snapshot(), before)
        self.assertFalse(VoucherItem.objects.exists())
        self.assertEqual(self.balance_of(self.cash).amount, Decimal("0"))

    def test_items_and_total_must_agree(self):
        with self.assertRaises(UnbalancedEntry):
            post_voucher(self.company, VoucherType.SALES_INVOICE,
                         date=self.today, total_amount="99",
                         items=[{"item": self.widget.pk, "quantity": "1",
                                 "rate": "100"}])

    def test_item_of_another_company_is_not_found(self):
        other = Company.objects.create(name="Other", slug="other")
        foreign = self.make_item("FOR", company=other)
        with self.assertRaises(ItemNotFound):
            post_voucher(self.company, VoucherType.SALES_INVOICE,
                         date=self.today,
                         items=[{"item": foreign.pk, "quantity": "1",
                                 "rate": "1"}])
        foreign.refresh_from_db()
        self.assertEqual(foreign.current_stock, Decimal("10"))

    def test_line_items_only_on_item_bearing_types(self):
        with self.assertRaises(ForbiddenField):
            post_voucher(self.company, VoucherType.RECEIPT, date=self.today,
                         party=self.make_ledger("Acme"), total_amount="1",
                         items=[{"item": self.widget.pk, "quantity": "1",
                                 "rate": "1"}])


class ValidationTests(BooksTestCase):
    def setUp(self):
        super().setUp()
        self.rent = self.make_ledger("Rent", AccountGroup.INDIRECT_EXPENSES)

    def test_unknown_voucher_type(self):
        before = self.snapshot()
        for bad in ("INVOICE", "", None, "sales_invoice"):
            with self.assertRaises(InvalidVoucherType):
                post_voucher(self.company, bad, total_amount="10")
        self.assertEqual(self.snapshot(), before)

    def test_item_bearing_types_need_items_or_a_total(self):
        for voucher_type in (VoucherType.SALES_INVOICE,
                             VoucherType.PURCHASE_INVOICE,
                             VoucherType.DEBIT_NOTE,
                             VoucherType.CREDIT_NOTE):
            with self.assertRaises(MissingLineItems):
                post_voucher(self.company, voucher_type, date=self.today)
            with self.assertRaises(MissingLineItems):
                post_voucher(self.company, voucher_type, date=self.today,
                             items=[])

    def test_journal_ledgers_must_exist_in_the_company(self):
        other = Company.objects.create(name="Other", slug="other")
        foreign = Ledger.objects.get(company=other, code="CASH_IN_HAND")
        with self.assertRaises(UnknownAccount):
            post_voucher(self.company, VoucherType.JOURNAL, date=self.today,
                         debit_ledger=self.rent, credit_ledger=foreign,
                         total_amount="10")
        with self.assertRaises(UnknownAccount):
            post_voucher(self.company, VoucherType.JOURNAL, date=self.today,
                         debit_ledger=999999, credit_ledger=self.cash,
                         total_amount="10")
        with self.assertRaises(UnknownAccount):
            post_voucher(self.company, VoucherType.JOURNAL, date=self.today,
                         debit_ledger=self.rent, total_amount="10")
        self.assertFalse(JournalLine.objects.filter(ledger=foreign).exists())

    def test_unknown_ledger_is_reported_before_imbalance(self):
        with self.assertRaises(UnknownAccount):
            post_voucher(self.company, VoucherType.JOURNAL, date=self.today,
                         entries=[{"ledger": self.rent.pk, "debit": "10"},
                                  {"ledger": 424242, "credit": "9"}])

    def test_unbalanced_journal_is_never_persisted(self):
        before = self.snapshot()
        with self.assertRaises(UnbalancedEntry):
            post_voucher(self.company, VoucherType.JOURNAL, date=self.today,
                         entries=[{"ledger": self.rent.pk, "debit": "10.00"},
                                  {"ledger": self.cash.pk, "credit": "9.99"}])
        self.assertEqual(self.snapshot(), before)

    def test_entry_must_be_one_sided(self):
        for entry in ({"ledger": self.rent.pk, "debit": "5", "credit": "5"},
                      {"ledger": self.rent.pk}):
            with self.assertRaises(UnbalancedEntry):
                post_voucher(self.company, VoucherType.JOURNAL,
                             date=self.today,
                             entries=[entry,
                                      {"ledger": self.cash.pk, "credit": "5"}])

    def test_single_entry_journal_is_rejected(self):
        with self.assertRaises(UnbalancedEntry):
            post_voucher(self.company, VoucherType.JOURNAL, date=self.today,
                         entries=[{"ledger": self.rent.pk, "debit": "5"}])

    def test_arguments_the_type_ignores_are_rejected(self):
        party = self.make_ledger("Acme", AccountGroup.SUNDRY_DEBTORS)
        entries = [{"ledger": self.rent.pk, "debit": "5"},
                   {"ledger": self.cash.pk, "credit": "5"}]
        before = self.snapshot()
        calls = [
            (VoucherType.PAYMENT, dict(party=party, total_amount="5",
                                       entries=entries)),
            (VoucherType.JOURNAL, dict(entries=entries,
                                       debit_ledger=self.rent)),
            (VoucherType.JOURNAL, dict(entries=entries, total_amount="5")),
            (VoucherType.JOURNAL, dict(debit_ledger=self.rent,
                                       credit_ledger=self.cash,
                                       total_amount="5", party=party)),
            (VoucherType.OPENING_BALANCE, dict(entries=entries,
                                               party=party)),
            (VoucherType.SALES_INVOICE, dict(total_amount="5",
                                             debit_ledger=self.rent)),
            (VoucherType.SALES_INVOICE, dict(total_amount="5", party=party,
                                             cash_ledger=self.cash)),
        ]
        for voucher_type, kwargs in calls:
            with self.assertRaises(ForbiddenField):
                post_voucher(self.company, voucher_type, date=self.today,
                             **kwargs)
        self.assertEqual(self.snapshot(), before)

    def test_rejection_names_the_unused_arguments(self):
        with self.assertRaisesMessage(ForbiddenField,
                                      "debit_ledger, credit_ledger"):
            post_voucher(self.company, VoucherType.RECEIPT, date=self.today,
                         party=self.rent, total_amount="5",
                         debit_ledger=self.cash, credit_ledger=self.rent)

    def test_cash_ledger_is_kept_for_a_partyless_sale(self):
        bank = self.make_ledger("City Bank", AccountGroup.BANK_ACCOUNTS)
        voucher = post_voucher(self.company, VoucherType.SALES_INVOICE,
                               date=self.today, total_amount="5",
                               cash_ledger=bank)
        self.assertTrue(
            voucher.journal_lines.filter(ledger=bank,
                                         debit=Decimal("5.00")).exists())

    def test_voucher_party_must_share_the_company(self):
        other = Company.objects.create(name="Other", slug="other")
        foreign = Ledger.objects.get(company=other, code="CASH_IN_HAND")
        with self.assertRaises(ValidationError):
            Voucher.objects.create(
                company=self.company, number="RV-9999",
                voucher_type=VoucherType.RECEIPT, date=self.today,
                party=foreign, total_amount=Decimal("1.00"),
            )
        self.assertFalse(Voucher.objects.filter(number="RV-9999").exists())

    def test_amounts_must_be_positive_numbers(self):
        for amount in ("-5", "0", "abc", None, "NaN", True):
            with self.assertRaises(InvalidAmount):
                post_voucher(self.company, VoucherType.JOURNAL,
                             date=self.today, debit_ledger=self.rent,
                             credit_ledger=self.cash, total_amount=amount)

    def test_amounts_are_rounded_to_the_cent(self):
        voucher = post_voucher(self.company, VoucherType.JOURNAL,
                               date=self.today, debit_ledger=self.rent,
                               credit_ledger=self.cash,
                               total_amount="10.005")
        self.assertEqual(voucher.total_amount, Decimal("10.01"))

    def test_write_time_check_rejects_an_unbalanced_voucher(self):
        voucher = Voucher.objects.create(
            company=self.company, number="JV-9999",
            voucher_type=VoucherType.JOURNAL, date=self.today,
            total_amount=Decimal("10.00"),
        )
        JournalLine.objects.create(voucher=voucher, ledger=self.rent,
                                   debit=Decimal("10.00"),
                                   entry_date=self.today)
        with self.assertRaises(UnbalancedEntry):
            _assert_balanced(voucher)


class CreateVoucherTests(BooksTestCase):
    def test_dict_payload_is_posted(self):
        voucher = create_voucher(self.company, {
            "voucher_type": "SALES_INVOICE",
            "date": "2025-05-02",
            "total_amount": "42.50",
            "narration": "Counter sale",
        })
        self.assertEqual(voucher.date, datetime.date(2025, 5, 2))
        self.assertEqual(voucher.narration, "Counter sale")
        self.assertEqual(voucher.journal_lines.count(), 2)

    def test_company_cannot_be_passed_as_data(self):
        other = Company.objects.create(name="Other", slug="other")
        for key in ("company", "company_id"):
            with self.assertRaises(ForbiddenField):
                create_voucher(self.company, {
                    "voucher_type": "SALES_INVOICE",
                    "total_amount": "10",
                    key: other.pk,
                })
        self.assertFalse(Voucher.objects.exists())

    def test_unknown_keys_are_rejected(self):
        for key in ("number", "status", "amount_paid", "is_active"):
            with self.assertRaises(ForbiddenField):
                create_voucher(self.company, {
                    "voucher_type": "SALES_INVOICE",
                    "total_amount": "10",
                    key: "x",
                })

    def test_item_rows_are_allow_listed_too(self):
        item = self.make_item()
        with self.assertRaises(ForbiddenField):
            create_voucher(self.company, {
                "voucher_type": "SALES_INVOICE",
                "items": [{"item": item.pk, "quantity": "1", "rate": "5",
                           "amount": "1000"}],
            })
        self.assertEqual(Item.objects.get(pk=item.pk).current_stock,
                         Decimal("10"))


class OpeningBalanceTests(BooksTestCase):
    def setUp(self):
        super().setUp()
        self.bank = self.make_ledger("City Bank", AccountGroup.BANK_ACCOUNTS)
        self.loan = self.make_ledger("Term Loan", AccountGroup.LOANS_LIABILITY)

    def test_unbalanced_opening_balance_is_rejected(self):
        with self.assertRaises(UnbalancedEntry):
            create_opening_balance(self.company, [
                {"ledger": self.bank.pk, "debit": "1000"},
                {"ledger": self.capital.pk, "credit": "900"},
            ])
        self.assertFalse(Voucher.objects.filter(
            voucher_type=VoucherType.OPENING_BALANCE).exists())

    def test_only_one_opening_balance_ever(self):
        voucher = create_opening_balance(self.company, [
            {"ledger": self.bank.pk, "debit": "1500"},
            {"ledger": self.cash.pk, "debit": "500"},
            {"ledger": self.loan.pk, "credit": "800"},
            {"ledger": self.capital.pk, "credit": "1200"},
        ], date=self.today)
        self.assertEqual(voucher.number, "OB-0001")
        self.assertEqual(voucher.narration, "Opening Balance")
        self.assertEqual(voucher.total_amount, Decimal("2000.00"))
        self.assertEqual(voucher.journal_lines.count(), 4)

        with self.assertRaises(OpeningBalanceAlreadyExists):
            create_opening_balance(self.company, [
                {"ledger": self.bank.pk, "debit": "1"},
                {"ledger": self.capital.pk, "credit": "1"},
            ])
        # also through the generic entry point
        with self.assertRaises(OpeningBalanceAlreadyExists):
            create_voucher(self.company, {
                "voucher_type": "OPENING_BALANCE",
                "entries": [{"ledger": self.bank.pk, "debit": "1"},
                            {"ledger": self.capital.pk, "credit": "1"}],
            })

    def test_each_company_gets_its_own_opening_balance(self):
        other = Company.objects.create(name="Other", slug="other")
        other_cash = Ledger.objects.get(company=other, code="CASH_IN_HAND")
        other_capital = Ledger.objects.get(company=other,
                                           code="CAPITAL_ACCOUNT")
        create_opening_balance(self.company, [
            {"ledger": self.cash.pk, "debit": "10"},
            {"ledger": self.capital.pk, "credit": "10"},
        ])
        voucher = create_opening_balance(other, [
            {"ledger": other_cash.pk, "debit": "10"},
            {"ledger": other_capital.pk, "credit": "10"},
        ])
        self.assertEqual(voucher.number, "OB-0001")

    def test_stock_movements_are_untouched(self):
        create_opening_balance(self.company, [
            {"ledger": self.cash.pk, "debit": "10"},
            {"ledger": self.capital.pk, "credit": "10"},
        ])
        self.assertFalse(StockMovement.objects.exists())
