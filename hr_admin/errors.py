"""
Fehlerarten der Fachlogik.

Der Service wirft ausschließlich ServiceError; die Art steht in `kind`.
Die HTTP-Schicht übersetzt jede Art über STATUS_BY_KIND in einen Statuscode.
"""
import enum


class ErrorKind(enum.Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    REPOSITORY = "REPOSITORY"


STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.REPOSITORY: 500,
}

# Interne Details von Datenbankfehlern gehen nie an den Aufrufer
GENERIC_FAILURE_MESSAGE = "Internal server error"


class ServiceError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @property
    def public_message(self) -> str:
        if self.kind is ErrorKind.REPOSITORY:
            return GENERIC_FAILURE_MESSAGE
        return self.message

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value}, {self.message!r})"


def unauthorized(message: str = "Insufficient permissions") -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message)

def not_found(message: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)

def validation_error(message: str) -> ServiceError:
    return ServiceError(ErrorKind.VALIDATION, message)

def repository_error(message: str) -> ServiceError:
    return ServiceError(ErrorKind.REPOSITORY, message)
