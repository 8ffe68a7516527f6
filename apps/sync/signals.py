"""Record writes to owner data in the change feed."""

from django.contrib.auth import get_user_model
from django.db import models
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.customers.models import Customer
from apps.invoices.models import Invoice
from apps.stores.models import Store

from .models import ChangeEventType
from .services.changes import model_payload, record_change

TABLES = {
    Invoice: 'invoices',
    Store: 'stores',
    Customer: 'customers',
}


def _owner_id(instance):
    if isinstance(instance, Customer):
        return Store.objects.filter(id=instance.store_id).values_list('user_id', flat=True).first()
    return instance.user_id


def _owner_deleted(origin) -> bool:
    """True when the delete cascades from a user, whose events go with them."""
    model = origin._meta.model if isinstance(origin, models.Model) else getattr(origin, 'model', None)
    return model is not None and issubclass(model, get_user_model())


@receiver(post_save, sender=Invoice)
@receiver(post_save, sender=Store)
@receiver(post_save, sender=Customer)
def record_save(sender, instance, created, raw=False, **kwargs):
    if raw:
        return
    user_id = _owner_id(instance)
    if user_id is None:
        return
    record_change(
        user_id=user_id,
        table=TABLES[sender],
        event=ChangeEventType.INSERT if created else ChangeEventType.UPDATE,
        record_id=instance.pk,
        payload=model_payload(instance),
    )


@receiver(post_delete, sender=Invoice)
@receiver(post_delete, sender=Store)
@receiver(post_delete, sender=Customer)
def record_delete(sender, instance, origin=None, **kwargs):
    if origin is not None and _owner_deleted(origin):
        return
    user_id = _owner_id(instance)
    if user_id is None:
        return
    record_change(
        user_id=user_id,
        table=TABLES[sender],
        event=ChangeEventType.DELETE,
        record_id=instance.pk,
        payload={'id': instance.pk},
    )
