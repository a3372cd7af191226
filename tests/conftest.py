import copy
from types import SimpleNamespace

import pytest

from db import session_scope
from db.models import Product
from main import create_app


class FakeRepository:
    """In-memory stand-in for services.product_repository.ProductRepository."""

    def __init__(self, products=(), fail_writes=False):
        self.products: dict[int, SimpleNamespace] = {}
        self.find_calls: list[tuple[list, list]] = []
        self.write_batches: list[int] = []
        self.fail_writes = fail_writes
        self._next_id = 1
        for data in products:
            self.create_product(dict(data))

    def find_products(self, names_in=(), barcodes_in=()):
        names, barcodes = set(names_in), set(barcodes_in)
        self.find_calls.append((sorted(names), sorted(barcodes)))
        return [
            p for p in self.products.values()
            if p.name in names or (p.barcode and p.barcode in barcodes)
        ]

    def create_product(self, data):
        record = {"description": None, "barcode": None, "price": 0,
                  "stock": 0, "active": True}
        record.update(data)
        product = SimpleNamespace(id=self._next_id, **record)
        self.products[product.id] = product
        self._next_id += 1
        return product

    def update_product(self, product_id, data):
        product = self.products[product_id]
        for attr, value in data.items():
            setattr(product, attr, value)
        return product

    def run_atomically(self, operations):
        snapshot = copy.deepcopy(self.products)
        try:
            if self.fail_writes:
                raise RuntimeError("database is locked")
            for op in operations:
                op.apply(self)
        except Exception:
            self.products = snapshot
            raise
        self.write_batches.append(len(operations))

    def by_name(self, name):
        return next((p for p in self.products.values() if p.name == name), None)


@pytest.fixture
def make_repo():
    return FakeRepository


@pytest.fixture
def app(tmp_path):
    app = create_app(
        db_url=f"sqlite:///{tmp_path / 'test.sqlite'}",
        rate_limit="1000 per minute",
    )
    app.config.update(TESTING=True)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def stored_products(app):
    """Return a callable listing every stored product as a dict."""
    def _list():
        with session_scope() as session:
            return [p.to_dict() for p in session.query(Product).order_by(Product.id)]
    return _list
