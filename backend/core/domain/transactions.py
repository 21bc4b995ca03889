"""
core.domain.transactions: Helpers for safe state transitions.

Wraps ``transaction.atomic`` and ``select_for_update`` into reusable
patterns so that every lifecycle mutation follows the same
concurrency-safe approach.

Design goals
------------
* Ensure that state-transition reads always lock the row first
  (``select_for_update``) so two requests cannot interleave a
  read-check-write on the same row.
* Keep the helpers **generic**: they accept any Django ``Model``
  instance and a field name.

Usage::

    from core.domain.transactions import atomic_transition

    updated = atomic_transition(
        instance=complaint,
        status_field="status",
        target_status="closed",
        allowed_sources={"resolved"},
    )

    # Inside an existing atomic block:
    from core.domain.transactions import lock_for_update

    complaint = lock_for_update(Complaint, complaint_id)
"""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

from django.db import models, transaction

from core.domain.exceptions import InvalidTransition, NotFound

M = TypeVar("M", bound=models.Model)


def atomic_transition(
    *,
    instance: M,
    status_field: str = "status",
    target_status: str,
    allowed_sources: Iterable[str] | None = None,
    reason: str | None = None,
) -> M:
    """
    Atomically transition a model instance from one status to another.

    Steps performed inside ``transaction.atomic()``:
        1. Re-fetch the instance with ``select_for_update()`` to acquire
           a row-level lock.
        2. Read the current value of ``status_field``.
        3. If ``allowed_sources`` is provided, verify the current value
           is among them; raise ``InvalidTransition`` otherwise.
        4. Set ``status_field`` to ``target_status`` and save.
        5. Return the refreshed instance.

    Args:
        instance:        The model instance to transition.
        status_field:    Name of the status field on the model.
        target_status:   The desired new value.
        allowed_sources: Optional set of status values from which the
                         transition is permitted.  ``None`` means any
                         current value is accepted.
        reason:          Explanation attached to ``InvalidTransition``.

    Returns:
        The same instance with the updated field value persisted.

    Raises:
        NotFound:          If the instance no longer exists in the DB.
        InvalidTransition: If the current status is not in ``allowed_sources``.
    """
    model_class = type(instance)
    allowed = set(allowed_sources) if allowed_sources is not None else None

    with transaction.atomic():
        locked = lock_for_update(model_class, instance.pk)
        current = getattr(locked, status_field)

        if allowed is not None and current not in allowed:
            raise InvalidTransition(
                current=str(current),
                target=str(target_status),
                reason=reason or (
                    "Allowed source states: "
                    + ", ".join(sorted(str(s) for s in allowed))
                ),
            )

        setattr(locked, status_field, target_status)
        locked.save(update_fields=[status_field, "updated_at"])

    # Refresh caller's reference
    instance.refresh_from_db()
    return instance


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with id {pk} does not exist.")
