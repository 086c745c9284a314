"""Pytest configuration and fixtures"""

import pytest

from legal_forms.db import InMemoryDocumentStore, SQLiteDocumentStore
from legal_forms.services.documents import DocumentService
from legal_forms.services.registry import TemplateRegistry
from legal_forms.utils.config import get_settings


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    """Set up test environment with temporary database and output directory"""
    db_path = tmp_path / "test.db"
    output_dir = tmp_path / "output"

    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("OUTPUT_DIR", str(output_dir))
    monkeypatch.setenv("STORE_MODE", "sqlite")
    monkeypatch.delenv("TEMPLATES_DIR", raising=False)
    monkeypatch.delenv("FONT_DIR", raising=False)

    yield

    # Cleanup handled by tmp_path fixture


@pytest.fixture
def registry():
    return TemplateRegistry.default()


@pytest.fixture
def memory_service(registry):
    return DocumentService(registry, InMemoryDocumentStore())


@pytest.fixture
def sqlite_service(registry):
    return DocumentService(registry, SQLiteDocumentStore(get_settings().database_path))


@pytest.fixture
def purchase_data():
    """A fully filled purchase agreement record"""
    return {
        "sellerName": "Jane Seller",
        "sellerAddress": "12 Elm Street, Albany, NY",
        "buyerName": "John Buyer",
        "buyerAddress": "34 Oak Avenue, Troy, NY",
        "propertyAddress": "56 Maple Road",
        "city": "Saratoga Springs",
        "county": "Saratoga",
        "state": "New York",
        "purchasePrice": 500000,
        "depositAmount": 25000,
        "cashAtClosing": 75000,
        "titleInsurance": "Purchaser",
        "closingDate": "2024-06-01",
    }


@pytest.fixture
def termination_data():
    return {
        "sellerName": "Jane Seller",
        "buyerName": "John Buyer",
        "propertyAddress": "56 Maple Road",
        "contractDate": "2024-03-15",
    }


@pytest.fixture
def counter_offer_data():
    return {
        "originalOfferDate": "2024-04-01",
        "propertyAddress": "56 Maple Road",
        "sellerName": "Jane Seller",
        "buyerName": "John Buyer",
        "counterOfferTerms": "Purchase price increased to $510,000.",
        "expirationDate": "2024-04-10",
        "acceptanceType": "Accepts",
    }
