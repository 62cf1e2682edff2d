"""Authentication exceptions (``ErrorKind.UNAUTHORIZED``)."""

from __future__ import annotations

from modules.core.exceptions import Unauthorized


class InvalidCredentials(Unauthorized):
    """Unknown email, wrong password or inactive account.

    A single message for all three so the response does not reveal which
    accounts exist.
    """

    default_message = "E-mail ou senha inválidos"


class InvalidToken(Unauthorized):
    default_message = "Token expirado ou inválido"
