"""Give every new company its starter ledgers."""
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Company
from .services.ledgers import provision_system_accounts

logger = logging.getLogger(__name__)


# post_save auto-fires after a Company row is written
@receiver(post_save, sender=Company)
def provision_new_company(sender, instance, created, raw=False, **kwargs):
    # fixtures (raw) bring their own ledgers
    if created and not raw:
        provision_system_accounts(instance)
        logger.info("Provisioned system accounts for company %s", instance.pk)
