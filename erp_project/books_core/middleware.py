from django.utils.deprecation import MiddlewareMixin
from .models import Company, Membership


class CurrentCompanyMiddleware(MiddlewareMixin):
    # Run on every request and attach the trusted tenant as request.company.
    # Services only ever take the company from here, never from payload data.
    def process_request(self, request):
        request.company = None
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            # Unauthenticated users get no company
            return

        memberships = Membership.objects.filter(user=user, is_active=True)

        # If user switched companies,
        # choice is stored in the session as "active_company_id"
        company_id = request.session.get("active_company_id")
        if company_id:
            # user must hold an active membership of that company, so a
            # tampered session cannot "jump" into another tenant
            request.company = Company.objects.filter(
                pk=company_id, memberships__in=memberships
            ).first()
            return

        # Default company fallback
        default = (memberships.filter(is_default=True)
                   .select_related("company").first())
        if default is not None:
            request.company = default.company
