"""Exceptions and error kinds raised by the HTML client layer."""
from __future__ import annotations

from enum import Enum


class HtmlClientError(Exception):
    """Base class for every error raised by the HTML client layer."""


class ClientError(HtmlClientError):
    """User-facing error raised while rendering a client (catalog "client")."""


class ControllerError(HtmlClientError):
    """Error reported by a frontend controller (catalog "controller/frontend")."""


class DomainError(HtmlClientError):
    """Error reported by the domain layer (catalog "mshop")."""


class InvalidName(ClientError):
    """Client or decorator name contains characters outside [A-Za-z0-9]."""

    def __init__(self, name: str, *, kind: str = "client"):
        super().__init__(f'Invalid characters in {kind} name "{name}"')
        self.name = name
        self.kind = kind


class UnknownClient(ClientError):
    """No client is registered for the requested path/name pair."""

    def __init__(self, path: str, name: str):
        super().__init__(f'Class "{name}" not available for client "{path}"')
        self.path = path
        self.name = name


class UnknownDecorator(ClientError):
    """No decorator is registered for the requested name."""

    def __init__(self, name: str, *, scope: str = ""):
        where = f' in scope "{scope}"' if scope else ""
        super().__init__(f'Decorator "{name}" not available{where}')
        self.name = name
        self.scope = scope


class ErrorKind(Enum):
    CLIENT = "client"
    CONTROLLER = "controller/frontend"
    DOMAIN = "mshop"
    UNEXPECTED = "unexpected"

    @property
    def catalog(self) -> str:
        # Les erreurs inattendues sont traduites avec le catalogue client.
        if self is ErrorKind.UNEXPECTED:
            return ErrorKind.CLIENT.value
        return self.value

    @property
    def recoverable(self) -> bool:
        return self is not ErrorKind.UNEXPECTED


UNEXPECTED_MESSAGE = "A non-recoverable error occured"


def kind_of(exc: BaseException) -> ErrorKind:
    if isinstance(exc, ControllerError):
        return ErrorKind.CONTROLLER
    if isinstance(exc, DomainError):
        return ErrorKind.DOMAIN
    if isinstance(exc, ClientError):
        return ErrorKind.CLIENT
    return ErrorKind.UNEXPECTED


def message_of(exc: BaseException) -> str:
    """Message shown to the visitor; unexpected errors never leak their details."""
    if kind_of(exc).recoverable:
        return str(exc)
    return UNEXPECTED_MESSAGE
