"""Models package - in-memory POS types."""
from backoffice.models.catalog import CatalogProduct, CatalogStore, CatalogSnapshot
from backoffice.models.sale_draft import CartLine, SaleDraft, PaymentMethod, normalize_payment_method
from backoffice.models.sale import SaleStatus, REVERSED_STATUSES

__all__ = [
    'CatalogProduct', 'CatalogStore', 'CatalogSnapshot',
    'CartLine', 'SaleDraft', 'PaymentMethod', 'normalize_payment_method',
    'SaleStatus', 'REVERSED_STATUSES',
]
