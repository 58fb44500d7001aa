from enum import Enum


class CheckoutRecsError(Exception):
    """Base exception for the project."""


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    MALFORMED = "malformed"


class FetchError(CheckoutRecsError):
    """Raised when a Storefront lookup fails or returns data we cannot use."""

    def __init__(self, kind: FetchErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.args[0]}"


class MutationErrorKind(str, Enum):
    REJECTED = "rejected"


class MutationError(CheckoutRecsError):
    """Raised by a cart mutator when the cart change could not be applied."""

    def __init__(self, message: str, kind: MutationErrorKind = MutationErrorKind.REJECTED):
        super().__init__(message)
        self.kind = kind


class AddInProgressError(CheckoutRecsError):
    """Raised when an add-to-cart is requested while another variant is being added."""

    def __init__(self, requested_variant_id: str, adding_variant_id: str):
        super().__init__(
            f"cannot add {requested_variant_id}: {adding_variant_id} is still being added"
        )
        self.requested_variant_id = requested_variant_id
        self.adding_variant_id = adding_variant_id
