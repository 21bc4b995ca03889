"""
Core app models.

Provides abstract base models and the persisted key/value rows behind
the runtime system settings store.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class SystemSetting(TimeStampedModel):
    """
    One persisted runtime setting.

    Rows only exist for keys an administrator has changed; everything
    else falls back to ``core.settings_store.DEFAULT_SETTINGS``.
    """

    key = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Key",
    )
    value = models.JSONField(verbose_name="Value")
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="changed_settings",
        verbose_name="Updated By",
    )

    class Meta:
        verbose_name = "System Setting"
        verbose_name_plural = "System Settings"
        ordering = ["key"]

    def __str__(self):
        return f"{self.key} = {self.value!r}"
