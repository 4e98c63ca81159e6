"""Shared fixtures: a small brewery catalog and matching ERP records."""

from unittest.mock import MagicMock

import pytest

from models.order import Customer
from models.stock import StockCatalog


STOCK_RECORDS = [
    {"code": "ST20", "name": "Stout", "format": "keg20", "available_quantity": 10},
    {"code": "ST30", "name": "Stout", "format": "keg30", "available_quantity": 5},
    {"code": "ST75", "name": "Stout", "format": "box75cl", "available_quantity": 60},
    {"code": "NM75", "name": "Nightmare IPA", "format": "box75cl", "available_quantity": 36},
    {"code": "NM33", "name": "Nightmare IPA", "format": "box33cl", "available_quantity": 48},
    {"code": "PA20", "name": "Pale Ale", "format": "keg20", "available_quantity": 4},
]

CUSTOMER_RECORDS = [
    {"id": 1, "name": "The Crown"},
    {"id": 2, "name": "Red Lion"},
]


@pytest.fixture
def stock_records():
    return [dict(record) for record in STOCK_RECORDS]


@pytest.fixture
def catalog(stock_records):
    return StockCatalog.from_records(stock_records)


@pytest.fixture
def items(catalog):
    return catalog.items


@pytest.fixture
def customers():
    return [Customer.from_dict(record) for record in CUSTOMER_RECORDS]


@pytest.fixture
def mock_erp_client(stock_records):
    """ERP client mock answering with the test catalog and customers."""
    client = MagicMock()
    client.fetch_stock.return_value = stock_records
    client.fetch_customers.return_value = [dict(record) for record in CUSTOMER_RECORDS]
    client.submit_order.side_effect = lambda payload: 1000 + len(payload["lines"])
    return client
