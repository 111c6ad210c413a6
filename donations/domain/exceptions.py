class DonationError(Exception):
    """Base class for every failure the donation pipeline reports to its callers."""

    code = "donation_error"


class InvalidDonationRequest(DonationError):
    """Malformed or out-of-range input. Never retried automatically."""

    code = "invalid_request"


class InvalidRewardKind(InvalidDonationRequest):
    """Raised when the requested reward kind is neither coins nor money."""

    code = "invalid_reward_kind"

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f'Type must be "coins" or "money", got {kind!r}')


class AmountOutOfRange(InvalidDonationRequest):
    """Raised when a donation amount falls outside the accepted bounds."""

    code = "amount_out_of_range"

    def __init__(self, amount, minimum=None, maximum=None, message=None):
        self.amount = amount
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            message or f"Amount must be between {minimum}-{maximum}, got {amount}"
        )


class AccountNotFound(InvalidDonationRequest):
    """Raised when no account exists for the given AID."""

    code = "account_not_found"

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"AID {account_id} not found")


class DuplicateOrder(DonationError):
    """Raised when a confirmation replays an order that is already recorded."""

    code = "duplicate_order"

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} already processed")


class PaymentNotCompleted(DonationError):
    """Raised when the gateway capture reports anything other than COMPLETED."""

    code = "payment_not_completed"

    def __init__(self, order_id, status):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Payment for order {order_id} not completed (status={status})")


class PaymentGatewayError(DonationError):
    """Raised when the gateway cannot be reached or answers with an error."""

    code = "payment_gateway_error"


class Unauthorized(DonationError):
    code = "unauthorized"

    def __init__(self):
        super().__init__("Unauthorized - Invalid token")


class DonationNotFound(DonationError):
    """Raised when a donation does not exist or has already been settled."""

    code = "donation_not_found"

    def __init__(self, donation_id):
        self.donation_id = donation_id
        super().__init__(f"Donation {donation_id} not found")


class StoreFailure(DonationError):
    """Raised when the relational store aborts a unit of work."""

    code = "store_failure"
