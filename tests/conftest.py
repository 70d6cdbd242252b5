"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock, AsyncMock
from typing import Dict

# Keep test runs independent of a developer's shell
os.environ.setdefault("CART_API_URL", "http://stock.test")
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")

from cartstore.errors import NotFoundError
from cartstore.models import ProductInfo, StockInfo
from cartstore.storage import MemoryStore
from cartstore.store import CartStore

STORAGE_KEY = "cart:test"


@pytest.fixture
def stock_levels() -> Dict[int, int]:
    """Available units per product id; tests mutate it freely"""
    return {7: 3, 8: 5, 9: 0}


@pytest.fixture
def products() -> Dict[int, dict]:
    """Product API payloads per product id"""
    return {
        7: {"id": 7, "title": "Shoe", "price": 100, "image": "x"},
        8: {"id": 8, "title": "Sneaker", "price": 179.9, "image": "https://img.test/8.jpg"},
        9: {"id": 9, "title": "Boot", "price": 250, "image": "https://img.test/9.jpg"},
    }


@pytest.fixture
def mock_stock(stock_levels):
    """Mock StockService reading from stock_levels"""
    service = Mock()

    async def get(product_id):
        if product_id not in stock_levels:
            raise NotFoundError(f"/stock/{product_id} not found")
        return StockInfo(id=product_id, amount=stock_levels[product_id])

    service.get = AsyncMock(side_effect=get)
    return service


@pytest.fixture
def mock_catalog(products):
    """Mock ProductCatalog reading from products"""
    catalog = Mock()

    async def get(product_id):
        if product_id not in products:
            raise NotFoundError(f"/products/{product_id} not found")
        return ProductInfo.model_validate(products[product_id])

    catalog.get = AsyncMock(side_effect=get)
    return catalog


@pytest.fixture
def mock_notifier():
    """Mock Notifier"""
    return Mock()


@pytest.fixture
def memory_store():
    """Empty in-memory snapshot storage, wrapped to record writes"""
    store = MemoryStore()
    store.write = Mock(wraps=store.write)
    return store


@pytest.fixture
def make_store(mock_stock, mock_catalog, memory_store, mock_notifier):
    """Factory building a CartStore on the shared mocks"""
    def _make(storage=None):
        return CartStore(
            stock=mock_stock,
            catalog=mock_catalog,
            storage=storage if storage is not None else memory_store,
            notifier=mock_notifier,
            storage_key=STORAGE_KEY,
        )
    return _make


@pytest.fixture
def cart_store(make_store):
    """CartStore starting from empty storage"""
    return make_store()
