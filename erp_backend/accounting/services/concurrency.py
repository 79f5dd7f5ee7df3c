# accounting/services/concurrency.py

"""
Row locking + optimistic version checks used by every engine operation.

Rows the engine mutates (documents, products, customers, suppliers) carry a
`version` column. Writes go through `bump_version`, a compare-and-swap UPDATE
that only succeeds if nobody else changed the row since it was read.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from accounting.services.exceptions import ConcurrencyConflictError, NotFoundError


def lock_row(model, pk, *, label: str | None = None):
    """SELECT ... FOR UPDATE a single row or raise NotFoundError."""
    try:
        return model._default_manager.select_for_update().get(pk=pk)
    except (model.DoesNotExist, ValidationError, ValueError, TypeError) as exc:
        name = label or str(model._meta.verbose_name).capitalize()
        raise NotFoundError(f"{name} {pk} not found") from exc


def check_expected_version(instance, expected_version) -> None:
    if expected_version is None:
        return
    if int(expected_version) != instance.version:
        raise ConcurrencyConflictError(
            f"{instance} was modified concurrently "
            f"(expected version {expected_version}, found {instance.version})"
        )


def bump_version(instance, **changes) -> None:
    model = type(instance)
    if any(f.name == "updated_at" for f in model._meta.concrete_fields):
        changes.setdefault("updated_at", timezone.now())

    updated = model._default_manager.filter(pk=instance.pk, version=instance.version).update(
        version=F("version") + 1, **changes
    )
    if updated != 1:
        raise ConcurrencyConflictError(f"{instance} was modified concurrently; retry the operation")

    for field, value in changes.items():
        setattr(instance, field, value)
    instance.version += 1


def save_locked_fields(locked, changes: dict) -> None:
    """
    Write `changes` onto a row held by lock_row and bump its version.

    Only the named columns are written, so engine-owned fields (stock,
    balances, status, journal links) are never overwritten from a stale read.
    """
    for field, value in changes.items():
        setattr(locked, field, value)
    locked.version += 1

    update_fields = [*changes, "version"]
    if any(f.name == "updated_at" for f in type(locked)._meta.concrete_fields):
        update_fields.append("updated_at")
    locked.save(update_fields=update_fields)
