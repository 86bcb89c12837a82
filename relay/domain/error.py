"""Domain layer errors."""

from enum import Enum


class DomainError(Exception):
    """Base domain error."""

    pass


class CallbackStage(str, Enum):
    """Stages of the OAuth callback exchange.

    received -> validated -> exchanged -> resolved -> persisted -> completed
    """

    RECEIVED = "received"
    VALIDATED = "validated"
    EXCHANGED = "exchanged"
    RESOLVED = "resolved"
    PERSISTED = "persisted"
    COMPLETED = "completed"


class AuthFlowError(DomainError):
    """Base error for a failed OAuth callback.

    Attributes:
        status_code: HTTP status returned to the browser
        public_message: Message safe to show to the client
        stage: Last stage the callback reached before failing
    """

    status_code: int = 500
    public_message: str = "Authentication failed"

    def __init__(
        self,
        detail: str | None = None,
        *,
        stage: CallbackStage = CallbackStage.RECEIVED,
        public_message: str | None = None,
    ):
        if public_message is not None:
            self.public_message = public_message
        self.stage = stage
        super().__init__(detail or self.public_message)


class ProviderDeniedAuthorizationError(AuthFlowError):
    """The provider redirected back with an ``error`` parameter."""

    status_code = 400
    public_message = "Authorization failed"


class StateMismatchError(AuthFlowError):
    """The ``state`` parameter is absent or does not match the pending one.

    The message is the same whether or not a pending authorization existed.
    """

    status_code = 403
    public_message = "Security Error: State mismatch"


class MissingProofOfPossessionError(AuthFlowError):
    """The PKCE verifier expired, was already consumed, or was never issued."""

    status_code = 400
    public_message = "Security Error: Missing code verifier"


class MalformedCallbackError(AuthFlowError):
    """The ``code`` parameter is missing or not a single string."""

    status_code = 400
    public_message = "Invalid authorization code"


class TokenExchangeError(AuthFlowError):
    """The provider rejected the authorization code or was unreachable."""


class IdentityResolutionError(AuthFlowError):
    """The provider identity endpoint did not return a usable identifier."""


class PersistenceError(AuthFlowError):
    """The identity record could not be written."""
