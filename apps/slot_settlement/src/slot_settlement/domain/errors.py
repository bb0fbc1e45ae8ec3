"""Domain exceptions used across API and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


@dataclass(slots=True)
class DomainError(Exception):
    """Base exception for predictable domain failures."""

    code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(DomainError):
    """Raised when user sends semantically invalid input."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="INVALID_REQUEST",
            message=message
            or compose_error_message(
                cause="Request data violates business rules.",
                action="Adjust the input fields and try again.",
            ),
            status_code=HTTPStatus.BAD_REQUEST,
            details=details or {},
        )


class BatchNotFoundError(DomainError):
    """Raised when a settlement batch id cannot be resolved."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="BATCH_NOT_FOUND",
            message=message
            or compose_error_message(
                cause="Settlement batch was not found.",
                action="Check the batch id and retry.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )


class PairingNotFoundError(DomainError):
    """Raised when a settlement pairing id cannot be resolved."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="PAIRING_NOT_FOUND",
            message=message
            or compose_error_message(
                cause="Settlement pairing was not found.",
                action="Check the pairing id and retry.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )


class ParticipantNotFoundError(DomainError):
    """Raised when a participant is missing from the directory."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="PARTICIPANT_NOT_FOUND",
            message=message
            or compose_error_message(
                cause="Participant is not registered in the directory.",
                action="Use a registered participant name.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )


class StatePreconditionError(DomainError):
    """Base for operations requested at the wrong point of a lifecycle."""


class InvalidBatchStateError(StatePreconditionError):
    """Raised when a batch operation does not fit the batch status."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="INVALID_BATCH_STATE",
            message=message
            or compose_error_message(
                cause="Settlement batch is not active.",
                action="Only active batches accept this operation.",
            ),
            status_code=HTTPStatus.CONFLICT,
            details=details or {},
        )


class PairingsAlreadyGeneratedError(StatePreconditionError):
    """Raised when pairing generation runs twice for the same batch."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="PAIRINGS_ALREADY_GENERATED",
            message=message
            or compose_error_message(
                cause="Pairings were already generated for this batch.",
                action="Review the existing pairings instead of generating again.",
            ),
            status_code=HTTPStatus.CONFLICT,
            details=details or {},
        )


class PairingPartyMismatchError(StatePreconditionError):
    """Raised when someone outside the pairing tries to confirm it."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="PAIRING_PARTY_MISMATCH",
            message=message
            or compose_error_message(
                cause="Only the creditor or the debtor may confirm this pairing.",
                action="Ask one of the two involved participants to confirm it.",
            ),
            status_code=HTTPStatus.FORBIDDEN,
            details=details or {},
        )


class AuthenticationRequiredError(DomainError):
    """Raised when a request carries no resolvable participant identity."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="AUTHENTICATION_REQUIRED",
            message=message
            or compose_error_message(
                cause="Request identity is missing or unknown.",
                action="Send the X-User-Email header of a registered participant.",
            ),
            status_code=HTTPStatus.UNAUTHORIZED,
            details=details or {},
        )


class OperatorRequiredError(DomainError):
    """Raised when a non-operator calls an operator-only operation."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="OPERATOR_REQUIRED",
            message=message
            or compose_error_message(
                cause="This operation requires operator privileges.",
                action="Sign in with an operator account and retry.",
            ),
            status_code=HTTPStatus.FORBIDDEN,
            details=details or {},
        )


class TransactionNotFoundError(DomainError):
    """Raised when the transaction log has no record with the given id."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="TRANSACTION_NOT_FOUND",
            message=message
            or compose_error_message(
                cause="Transaction record was not found in the log.",
                action="Check the record id and retry.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )
