"""
core.settings_store: Runtime system settings with an explicit lifecycle.

Administrators tune a small set of portal-wide options (site name,
default complaint category / priority, maintenance mode, whether a
complaint's status may be moved backwards, ...).  Instead of a
process-wide mutable dict, these live in a ``SettingsStore``:

* **Defaults** are declared once in ``DEFAULT_SETTINGS``.  The default
  value's type is the declared type of the key.
* **load()** reads every persisted ``SystemSetting`` row over the
  defaults.  It runs lazily, the first time the store is read after
  the process starts, and again once the snapshot is older than
  ``refresh_seconds`` (``SYSTEM_SETTINGS_REFRESH_SECONDS``).  Every
  worker process holds its own snapshot, so a change made through one
  worker reaches the others within that interval.
* **get(key)** / **as_dict()** read from the loaded snapshot.
* **update(changes, actor)** validates every key and value, persists
  the changed rows inside one transaction, then refreshes the snapshot.
  Unknown keys or wrongly typed values raise ``InvalidValue`` and
  nothing is written.

Services receive a store instance through their constructor; callers
that don't care use ``get_settings_store()`` for the shared one.
"""

from __future__ import annotations

import copy
import logging
from time import monotonic
from typing import TYPE_CHECKING, Any

from django.conf import settings as django_settings
from django.db import transaction

from core.domain.access import require_capability
from core.domain.exceptions import InvalidValue
from core.permissions_constants import Capability

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "site_name": "Civic Complaints System",
    "site_description": "Report and track civic issues in your community",
    "contact_email": "admin@civic.gov",
    "max_file_size_mb": 5,
    "allowed_file_types": ["jpg", "jpeg", "png", "pdf"],
    "auto_assignment": False,
    "email_notifications": True,
    "sms_notifications": False,
    "default_priority": "medium",
    "default_category": "others",
    "maintenance_mode": False,
    "session_timeout_minutes": 30,
    "allow_backward_status_transitions": True,
}

_POSITIVE_INT_KEYS = frozenset({"max_file_size_mb", "session_timeout_minutes"})


class SettingsStore:
    """Read/write access to the persisted runtime settings."""

    def __init__(self, refresh_seconds: float | None = None) -> None:
        self._values: dict[str, Any] | None = None
        self._loaded_at = 0.0
        if refresh_seconds is None:
            refresh_seconds = getattr(django_settings, "SYSTEM_SETTINGS_REFRESH_SECONDS", 10)
        self.refresh_seconds = float(refresh_seconds)

    # ── Lifecycle ───────────────────────────────────────────────────

    def load(self) -> dict[str, Any]:
        """(Re)read persisted rows over the defaults."""
        from core.models import SystemSetting

        values = copy.deepcopy(DEFAULT_SETTINGS)
        for row in SystemSetting.objects.filter(key__in=DEFAULT_SETTINGS):
            values[row.key] = row.value
        self._values = values
        self._loaded_at = monotonic()
        return copy.deepcopy(values)

    @property
    def is_loaded(self) -> bool:
        return self._values is not None

    @property
    def is_stale(self) -> bool:
        return monotonic() - self._loaded_at >= self.refresh_seconds

    def _snapshot(self) -> dict[str, Any]:
        if self._values is None or self.is_stale:
            self.load()
        return self._values

    # ── Read contract ───────────────────────────────────────────────

    def get(self, key: str) -> Any:
        if key not in DEFAULT_SETTINGS:
            raise InvalidValue(f"Unknown setting '{key}'.")
        return copy.deepcopy(self._snapshot()[key])

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._snapshot())

    # ── Write contract ──────────────────────────────────────────────

    def update(self, changes: dict[str, Any], actor: User) -> dict[str, Any]:
        """
        Validate and persist ``changes``; return the full settings dict.

        Raises:
            PermissionDenied: ``actor`` may not manage settings.
            InvalidValue:     Unknown key or value of the wrong type.
        """
        from core.models import SystemSetting

        require_capability(
            actor,
            Capability.MANAGE_SETTINGS,
            message="Only administrators can change system settings.",
        )
        if not isinstance(changes, dict) or not changes:
            raise InvalidValue("Provide at least one setting to change.")

        for key, value in changes.items():
            self._validate(key, value)

        with transaction.atomic():
            for key, value in changes.items():
                SystemSetting.objects.update_or_create(
                    key=key,
                    defaults={"value": value, "updated_by": actor},
                )

        logger.info(
            "System settings %s changed by %s",
            sorted(changes),
            actor,
        )
        return self.load()

    @staticmethod
    def _validate(key: str, value: Any) -> None:
        from complaints.models import ComplaintCategory, ComplaintPriority

        if key not in DEFAULT_SETTINGS:
            raise InvalidValue(f"Unknown setting '{key}'.")

        expected = type(DEFAULT_SETTINGS[key])
        # bool is a subclass of int; keep the two apart.
        if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise InvalidValue(f"Setting '{key}' must be an integer.")
        if expected is not int and not isinstance(value, expected):
            raise InvalidValue(
                f"Setting '{key}' must be of type {expected.__name__}."
            )

        if key in _POSITIVE_INT_KEYS and value <= 0:
            raise InvalidValue(f"Setting '{key}' must be positive.")
        if key == "allowed_file_types" and not all(
            isinstance(item, str) and item for item in value
        ):
            raise InvalidValue("'allowed_file_types' must be a list of extensions.")
        if key == "default_priority" and value not in ComplaintPriority.values:
            raise InvalidValue(f"'{value}' is not a complaint priority.")
        if key == "default_category" and value not in ComplaintCategory.values:
            raise InvalidValue(f"'{value}' is not a complaint category.")


_default_store: SettingsStore | None = None


def get_settings_store() -> SettingsStore:
    """Return the process-wide store, creating it on first use."""
    global _default_store
    if _default_store is None:
        _default_store = SettingsStore()
    return _default_store


def reset_settings_store() -> None:
    """Drop the cached store so the next read reloads from the database."""
    global _default_store
    _default_store = None
