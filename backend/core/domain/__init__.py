"""
core.domain: Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler translating those exceptions into responses.
transactions       Helpers for ``transaction.atomic`` + ``select_for_update``.
access             Capability-scoped queryset selectors and guards.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.transactions import atomic_transition
    from core.domain.access import apply_capability_scope, require_capability
"""
