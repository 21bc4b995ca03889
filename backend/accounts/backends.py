"""
Login by username, phone number or e-mail address.

``LoginView`` calls ``authenticate(identifier=..., password=...)``; this
backend (listed in ``AUTHENTICATION_BACKENDS``) looks the identifier up
in all three unique columns.  E-mail matching ignores case.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


class MultiFieldAuthBackend(ModelBackend):

    @staticmethod
    def lookup(identifier: str):
        """Return the single matching user, or ``None``."""
        matches = list(
            User.objects.filter(
                Q(username=identifier)
                | Q(phone_number=identifier)
                | Q(email__iexact=identifier)
            )[:2]
        )
        # Two rows means the identifier is one user's username and
        # another's e-mail; refuse rather than guess.
        return matches[0] if len(matches) == 1 else None

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if not identifier or password is None:
            return None

        user = self.lookup(identifier)
        if user is None:
            # Hash anyway so unknown identifiers take as long as wrong passwords.
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
