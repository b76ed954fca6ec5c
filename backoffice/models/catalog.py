"""Catalog snapshot: products and stores loaded when the till opens."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Any

from backoffice.utils.number_format import parse_amount


@dataclass
class CatalogProduct:
    """Sellable product as returned by the product endpoint."""
    id: str
    name: str
    selling_price: Decimal
    sku: Optional[str] = None
    unit: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CatalogProduct':
        return cls(
            id=str(data['id']),
            name=data.get('name') or '',
            selling_price=parse_amount(data.get('sellingPrice', 0), 'Le prix de vente'),
            sku=data.get('sku'),
            unit=data.get('unit'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'sku': self.sku,
            'sellingPrice': str(self.selling_price),
            'unit': self.unit,
        }


@dataclass
class CatalogStore:
    """Store option for the store selector."""
    id: str
    name: str
    city: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CatalogStore':
        return cls(id=str(data['id']), name=data.get('name') or '', city=data.get('city'))

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'city': self.city}


@dataclass
class CatalogSnapshot:
    """
    Read-only view of the catalog, taken once per builder session.

    Prices read from here are frozen into cart lines; the snapshot is never
    refreshed while the draft is open.
    """
    products: Dict[str, CatalogProduct] = field(default_factory=dict)
    stores: List[CatalogStore] = field(default_factory=list)
    loaded_at: datetime = field(default_factory=datetime.now)

    def get_product(self, product_id) -> Optional[CatalogProduct]:
        if product_id is None:
            return None
        return self.products.get(str(product_id))

    def has_store(self, store_id) -> bool:
        return any(store.id == str(store_id) for store in self.stores)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'products': [p.to_dict() for p in self.products.values()],
            'stores': [s.to_dict() for s in self.stores],
            'loadedAt': self.loaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CatalogSnapshot':
        products = [CatalogProduct.from_api(p) for p in data.get('products', [])]
        loaded_at = data.get('loadedAt')
        return cls(
            products={p.id: p for p in products},
            stores=[CatalogStore.from_api(s) for s in data.get('stores', [])],
            loaded_at=datetime.fromisoformat(loaded_at) if loaded_at else datetime.now(),
        )
