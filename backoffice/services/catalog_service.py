"""Catalog Snapshot Loader - products and stores for the till."""

import logging
from typing import Optional

from backoffice.models import CatalogProduct, CatalogStore, CatalogSnapshot
from backoffice.services.api_client import BackendClient
from backoffice.services.cache_service import CacheService

logger = logging.getLogger(__name__)

PRODUCT_PAGE_LIMIT = 1000
STORE_PAGE_LIMIT = 100
CACHE_MODULE = 'catalog'


def fetch_products(api: BackendClient) -> dict:
    """Load active products keyed by id, keeping the backend order."""
    envelope = api.get('/product', params={
        'page': 1,
        'limit': PRODUCT_PAGE_LIMIT,
        'isActive': 'true'
    })
    products = {}
    for raw in (envelope.get('data') or {}).get('products', []):
        try:
            product = CatalogProduct.from_api(raw)
        except (KeyError, ValueError) as e:
            logger.warning(f"[POS] Skipping product {raw.get('id')!r} with unusable data: {e}")
            continue
        products[product.id] = product
    return products


def fetch_stores(api: BackendClient) -> list:
    envelope = api.get('/store', params={'page': 1, 'limit': STORE_PAGE_LIMIT})
    return [CatalogStore.from_api(raw) for raw in (envelope.get('data') or {}).get('stores', [])]


def fetch_catalog_snapshot(api: BackendClient) -> CatalogSnapshot:
    """Take a fresh snapshot of the sellable catalog and the store list."""
    snapshot = CatalogSnapshot(products=fetch_products(api), stores=fetch_stores(api))
    logger.info(
        f"[POS] Catalog snapshot loaded: {len(snapshot.products)} products, "
        f"{len(snapshot.stores)} stores"
    )
    return snapshot


def open_catalog_snapshot(
    api: BackendClient,
    cache: CacheService,
    draft_id: str,
    ttl: Optional[int] = None
) -> CatalogSnapshot:
    """Load a snapshot for a new draft and park it in the cache."""
    snapshot = fetch_catalog_snapshot(api)
    cache.set(draft_id, CACHE_MODULE, 'snapshot', snapshot.to_dict(), ttl)
    return snapshot


def get_catalog_snapshot(
    api: BackendClient,
    cache: CacheService,
    draft_id: str,
    ttl: Optional[int] = None
) -> CatalogSnapshot:
    """
    Return the snapshot taken for draft_id.

    Falls back to a fresh load when the cache lost it; prices already in
    the cart stay frozen either way.
    """
    data = cache.memoize(
        draft_id, CACHE_MODULE, 'snapshot',
        lambda: fetch_catalog_snapshot(api).to_dict(),
        ttl
    )
    return CatalogSnapshot.from_dict(data)


def drop_catalog_snapshot(cache: CacheService, draft_id: str) -> None:
    cache.delete(draft_id, CACHE_MODULE, 'snapshot')
