"""Errors raised by the pipeline controller."""

from __future__ import annotations

from genius_creator_schemas import SessionErrorKind

STRUCTURAL_FAILURE_MESSAGE = (
    "Ocorreu um erro ao comunicar com a IA. Verifique sua chave API ou tente novamente."
)
CREDENTIAL_UNAVAILABLE_MESSAGE = "É necessário selecionar uma chave API para continuar a geração."
INPUT_REJECTED_MESSAGE = "Informe o tema e o público-alvo para continuar."


class PipelineError(RuntimeError):
    """Base error for pipeline failures."""


class InvalidTransitionError(PipelineError):
    """Raised when an action is not allowed in the current step."""


class SessionFailure(PipelineError):
    """A failure that is reported to the user through the session ``error``."""

    kind: SessionErrorKind
    default_message: str

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self)


class StructuralFailure(SessionFailure):
    """Outline generation failed or returned an unusable outline."""

    kind = SessionErrorKind.STRUCTURAL
    default_message = STRUCTURAL_FAILURE_MESSAGE


class CredentialUnavailable(SessionFailure):
    """The provider credential is missing and could not be acquired."""

    kind = SessionErrorKind.CREDENTIAL
    default_message = CREDENTIAL_UNAVAILABLE_MESSAGE


class InputRejected(SessionFailure):
    """Topic or audience was blank."""

    kind = SessionErrorKind.INPUT
    default_message = INPUT_REJECTED_MESSAGE
