from src.pm_commitment.domain.models import OrderParameters
from src.pm_common.errors import InvalidOrderParamsError


def check_order_params(params: OrderParameters) -> None:
    """Raise InvalidOrderParamsError(7004) unless quantity > 0 and 0 <= minimum_fill <= quantity."""
    if params.quantity <= 0:
        raise InvalidOrderParamsError(f"quantity must be positive, got {params.quantity}")
    if params.limit_price < 0:
        raise InvalidOrderParamsError(f"limit_price must be non-negative, got {params.limit_price}")
    if not (0 <= params.minimum_fill <= params.quantity):
        raise InvalidOrderParamsError(
            f"minimum_fill {params.minimum_fill} must be in [0, {params.quantity}]"
        )


def check_escrow_amount(escrow_amount: int) -> None:
    if escrow_amount < 0:
        raise InvalidOrderParamsError(f"escrow_amount must be non-negative, got {escrow_amount}")
