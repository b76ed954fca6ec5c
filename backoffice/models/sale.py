"""Sale status as exposed by the sales endpoint."""
import enum


class SaleStatus(enum.Enum):
    """Sale status enum."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# Statuses after which the stock has already been restored
REVERSED_STATUSES = (SaleStatus.CANCELLED, SaleStatus.REFUNDED)
