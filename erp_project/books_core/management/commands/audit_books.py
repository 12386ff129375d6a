from django.core.management.base import BaseCommand, CommandError

from books_core.models import Company
from books_core.tasks import audit_company_books


class Command(BaseCommand):
    help = "Check that a company's trial balance and balance sheet close."

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument("slug", help="Slug of the company to audit.")
        parser.add_argument(
            "--as-of",  # Define flag
            default=None,
            help="Audit the books as of this date (YYYY-MM-DD).",
        )

    def handle(self, *args, **options):
        company = Company.objects.filter(slug=options["slug"]).first()
        if company is None:
            raise CommandError(f"No company with slug {options['slug']!r}")

        # run inline; the same task can be queued from a worker schedule
        result = audit_company_books(company.pk, as_of=options["as_of"])

        for name, ok in result["checks"].items():
            style = self.style.SUCCESS if ok else self.style.ERROR
            self.stdout.write(style(f"{name}: {'ok' if ok else 'FAILED'}"))
        self.stdout.write(
            f"Closing Dr {result['closing_debit']} / "
            f"Cr {result['closing_credit']}, "
            f"balance sheet difference {result['balance_sheet_difference']}"
        )
        if not result["ok"]:
            raise CommandError("Books do not balance.")
