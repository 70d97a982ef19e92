"""
Assistant - Error Classes

Custom exceptions raised while running an instruction through the
decide/act loop. Every one of them aborts the run; a resolution miss is not
an error and never appears here.

- PreconditionViolation: an action was called with missing or foreign scope
- DownstreamWriteError: the store rejected a write
- UpstreamModelError / MalformedDecisionError: the chat model failed or
  returned something we cannot act on
- UnknownActionError: an action name outside the manifest
- LoopExceeded / RunCancelled: the run was stopped before terminating
- WriteOnceViolation: a write-once run field would change value
- AuthenticationError: the caller token was rejected
"""


class AssistantError(Exception):
    """Base class for errors that abort an assistant run."""
    pass


class PreconditionViolation(AssistantError):
    """Raised when an action's preconditions do not hold. Nothing was written."""
    pass


class DownstreamWriteError(AssistantError):
    """Raised when the store rejects a write. The message is the store's own."""
    pass


class UpstreamModelError(AssistantError):
    """Raised when the chat model call fails."""
    pass


class MalformedDecisionError(UpstreamModelError):
    """Raised when the chat model returns output that cannot be acted on."""
    pass


class UnknownActionError(AssistantError):
    """Raised when the model requests an action that is not in the manifest."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown action requested: {name!r}")


class LoopExceeded(AssistantError):
    """Raised when the run keeps requesting actions past the iteration cap."""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__(
            f"Assistant did not finish within {max_iterations} decide/act iterations"
        )


class RunCancelled(AssistantError):
    """Raised before a decide step when the caller cancelled or the deadline passed."""
    pass


class WriteOnceViolation(AssistantError):
    """Raised when a write-once run field would be overwritten with a different value."""

    def __init__(self, field: str, current: object, update: object):
        self.field = field
        self.current = current
        self.update = update
        super().__init__(
            f"{field} is already set to {current!r}; refusing to overwrite with {update!r}"
        )


class AuthenticationError(AssistantError):
    """Raised when the caller token does not resolve to a user."""
    pass
