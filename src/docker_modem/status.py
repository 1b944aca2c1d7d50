"""Classification of HTTP statuses against an endpoint's status table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .errors import (
    BadRequestError,
    ConflictError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
)
from .parser import extract_error_message
from .request import StatusTable

SUCCESS = True
UNEXPECTED_STATUS = "unexpected status"

_ERRORS_BY_STATUS: dict[int, type[DomainError]] = {
    400: BadRequestError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: ConflictError,
}


@dataclass(frozen=True)
class Success:
    status: int
    body: Any = None


@dataclass(frozen=True)
class Failure:
    tag: str
    status: int
    body: Any = None

    def to_error(self) -> DomainError:
        error_cls = _ERRORS_BY_STATUS.get(self.status)
        if error_cls is None:
            error_cls = ServerError if self.status >= 500 else DomainError
        detail = extract_error_message(self.body) if self.body is not None else None
        message = f"{self.tag} (HTTP {self.status})"
        if detail:
            message = f"{message}: {detail}"
        return error_cls(message, tag=self.tag, status=self.status, body=self.body)


Outcome = Union[Success, Failure]


def is_success(table: StatusTable, status: int) -> bool:
    return table.get(status) is SUCCESS


def classify(table: StatusTable, status: int, body: Any = None) -> Outcome:
    outcome = table.get(status)
    if outcome is SUCCESS:
        return Success(status, body)
    if isinstance(outcome, str):
        return Failure(outcome, status, body)
    return Failure(UNEXPECTED_STATUS, status, body)


__all__ = ["Failure", "Outcome", "SUCCESS", "Success", "UNEXPECTED_STATUS", "classify", "is_success"]
