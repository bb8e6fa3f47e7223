"""Mini README: Month-end payment balancing.

The ``balance`` module holds the settlement value objects and the service
that previews, computes and saves monthly snapshots.
"""

from .balance import (
    PaymentBalance,
    PaymentBalanceService,
    PaymentBalanceSnapshot,
    VehiclePaymentDetail,
    split_payment,
)

__all__ = [
    "PaymentBalance",
    "PaymentBalanceService",
    "PaymentBalanceSnapshot",
    "VehiclePaymentDetail",
    "split_payment",
]
