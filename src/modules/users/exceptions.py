"""User domain exceptions.

Raised by the Service Layer when business rules are violated.  The
``ErrorKind`` of each class decides the HTTP status at the API boundary.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound, ValidationFailed


class UserAlreadyExists(Conflict):
    """A user with the same CPF or email already exists (active or not)."""

    default_message = "Usuário já cadastrado"


class UserNotFound(NotFound):
    default_message = "Usuário não encontrado"


class WeakPassword(ValidationFailed):
    """``errors`` lists one message per failed password rule."""

    default_message = "A senha não atende aos requisitos de segurança"


class ProtectedUser(ValidationFailed):
    """Hard delete of the administrative account or of the requester itself."""

    default_message = "Este usuário não pode ser excluído"
