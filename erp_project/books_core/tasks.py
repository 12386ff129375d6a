import logging

from celery import shared_task
from django.utils.dateparse import parse_date

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def audit_company_books(company_id, as_of=None):
    """
    Re-run the structural checks of one company's books and log every
    failure. Returns a JSON-friendly summary.
    """
    # import lazily to avoid circular imports at module import time
    from .models import Company
    from .services.reports import balance_sheet, trial_balance

    company = Company.objects.get(pk=company_id)
    # Celery passes dates as ISO strings
    if isinstance(as_of, str):
        as_of = parse_date(as_of)

    tb = trial_balance(company, end=as_of)
    bs = balance_sheet(company, as_of=as_of)

    checks = {
        "opening_balanced": tb.opening_balanced,
        "period_balanced": tb.period_balanced,
        "closing_balanced": tb.closing_balanced,
        "balance_sheet_balanced": bs.is_balanced,
    }
    for name, ok in checks.items():
        if not ok:
            logger.error("Books check %s failed for company %s (as of %s)",
                         name, company.pk, as_of)

    # Decimals go out as strings for the JSON result backend
    return {
        "company_id": company.pk,
        "as_of": as_of.isoformat() if as_of else None,
        "checks": checks,
        "closing_debit": str(tb.closing_debit),
        "closing_credit": str(tb.closing_credit),
        "balance_sheet_difference": str(bs.difference),
        "ok": all(checks.values()),
    }
