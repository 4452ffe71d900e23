"""
Chat exceptions — caller-input and authorization failures.

These exceptions are raised by the chat core and caught by the API layer,
which maps each kind to a distinct HTTP status:

- EntityNotFoundError   → 404 Not Found
- AccessDeniedError     → 403 Forbidden
- ConflictError         → 409 Conflict
- DomainValidationError → 422 Unprocessable Entity
- UnauthorizedError     → 401 Unauthorized

None of them is transient; nothing retries them.
"""


class ChatError(Exception):
    """Base class for every failure the chat core reports to its caller."""

    kind = "chat_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EntityNotFoundError(ChatError):
    """A conversation, message, veterinarian or user does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found with id: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class AccessDeniedError(ChatError):
    """The caller is not a participant (or not the sender)."""

    kind = "forbidden"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ConflictError(ChatError):
    """The request clashes with the current state of a resource."""

    kind = "conflict"


class ConversationClosedError(ConflictError):
    def __init__(self, conversation_id):
        super().__init__(f"Cannot send messages to closed conversation {conversation_id}")
        self.conversation_id = conversation_id


class VeterinarianUnavailableError(ConflictError):
    def __init__(self, veterinarian_id):
        super().__init__(f"Veterinarian {veterinarian_id} is not available for chat")
        self.veterinarian_id = veterinarian_id


class DomainValidationError(ChatError):
    """Input breaks a business rule (e.g. blank message content)."""

    kind = "validation_error"


class UnauthorizedError(ChatError):
    """No caller identity could be resolved from the request."""

    kind = "unauthorized"

    def __init__(self, message: str = "Missing or invalid credentials"):
        super().__init__(message)
