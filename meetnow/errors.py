"""
Error kinds raised by the order core. Each carries the HTTP status the API maps it to.
"""


class MeetNowError(Exception):
    """Base class for every recoverable failure of the order core."""

    status_code = 400

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.detail)


class OrderNotFoundError(MeetNowError):
    """Order does not exist. Stale reference: do not retry with the same id."""

    status_code = 404

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order {order_id} not found")


class DuplicateOrderError(MeetNowError):
    """Raised when an order id is already taken."""

    status_code = 409

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order {order_id} already exists")


class InvalidTransitionError(MeetNowError):
    """Raised when order status transition is not allowed. Status is left unchanged."""

    status_code = 409

    def __init__(self, current_status=None, attempted_status=None):
        self.current_status = current_status
        self.attempted_status = attempted_status
        current = getattr(current_status, "value", current_status)
        attempted = getattr(attempted_status, "value", attempted_status)
        super().__init__(f"invalid transition {current} -> {attempted}")


class InvalidStateError(MeetNowError):
    """Operation invoked out of sequence for the order's current state."""

    status_code = 409


class ChatClosedError(InvalidStateError):
    """Chat input is disabled once the order is completed or cancelled."""


class ConfirmationLimitError(InvalidStateError):
    """Too many rejected meetup confirmations on this order."""


class NoActiveRequestError(MeetNowError):
    """No meetup confirmation request is pending for this order."""

    status_code = 409


class NotAuthorizedError(MeetNowError):
    """Viewer is not allowed to perform this action on the order."""

    status_code = 403


class MessageNotFoundError(MeetNowError):
    """Chat message does not exist."""

    status_code = 404


class EmptyMessageError(MeetNowError):
    """Message content must not be empty."""

    status_code = 422


class SendFailedError(MeetNowError):
    """Simulated message delivery failed."""

    status_code = 502

    def __init__(self, message_id: str, retries_left: int, permanent: bool = False):
        self.message_id = message_id
        self.retries_left = retries_left
        self.permanent = permanent
        kind = "permanently failed" if permanent else f"failed ({retries_left} retries left)"
        super().__init__(f"message {message_id} {kind}")


class RetryLimitExceededError(MeetNowError):
    """Retry refused: the message already used every allowed retry."""

    status_code = 409


class MessageNotRetryableError(MeetNowError):
    """Only failed messages can be retried."""

    status_code = 409


class DuplicateRatingError(MeetNowError):
    """Participant already rated this order."""

    status_code = 409


class InvalidRatingError(MeetNowError):
    """Rating must be between 1 and 5 stars."""

    status_code = 422
