"""Address domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
carries an ``ErrorKind``; ``modules.core.exceptions.api_exception_handler``
translates the kind into the HTTP status.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound, ValidationFailed


class AddressNotFound(NotFound):
    default_message = "Endereço não encontrado"


class AddressOwnerUnavailable(NotFound):
    """The owning user does not exist or is inactive."""

    default_message = "Usuário não encontrado ou inativo"


class DuplicateAddress(Conflict):
    """Every comparable field matches another address of the same user."""

    default_message = "Endereço já cadastrado para este usuário"


class LastAddressRequired(ValidationFailed):
    default_message = "Cada usuário deve ter pelo menos um endereço"


class AddressConflict(Conflict):
    """A database constraint rejected the write (concurrent primary flip)."""

    default_message = "Conflito ao salvar o endereço, tente novamente"
