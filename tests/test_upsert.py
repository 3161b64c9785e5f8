import pytest

from catalog_pricing.database.upsert import BatchUpserter, upsert_products
from catalog_pricing.error_handler import StoreWriteFailure
from catalog_pricing.integrations.contracts.products import Price, Product, TierModel
from catalog_pricing.utils.hashing import stamp_hashes


def _product(sku, region="us-south", usd="1"):
    price = Price(
        unit="HOURS",
        purchase_option="1",
        tier_model=TierModel.LINEAR,
        usd_amount=usd,
        start_usage_amount="0",
        end_usage_amount="Inf",
        effective_date_start="2024-01-01",
        country="USA",
        currency="USD",
        part_number="part-1",
    )
    return stamp_hashes(
        Product(
            sku=sku,
            vendor_name="ibm",
            region=region,
            service=sku.split("-")[0],
            product_family="service",
            attributes={"planName": sku},
            prices=[price],
        )
    )


class FailingStore:
    def __init__(self):
        self.calls = 0

    def write_products(self, rows):
        self.calls += 1
        raise RuntimeError("connection reset")


def test_duplicate_hash_flushes_before_it_is_added(store):
    first = _product("svc-a", usd="1")
    other = _product("svc-b")
    again = _product("svc-a", usd="2")

    stats = upsert_products(store, [first, other, again], batch_size=10)

    assert store.batches == [
        [first.product_hash, other.product_hash],
        [again.product_hash],
    ]
    assert stats.batches_flushed == 2
    assert stats.products_written == 3
    stored = store.get_product(first.product_hash)
    [serialized] = next(iter(stored["prices"].values()))
    assert serialized["USD"] == "2"


def test_full_batch_is_flushed_and_trailing_batch_written(store):
    products = [_product(f"svc-{i}") for i in range(5)]

    stats = upsert_products(store, products, batch_size=2)

    assert [len(batch) for batch in store.batches] == [2, 2, 1]
    assert stats.batches_flushed == 3
    assert store.count_products() == 5


def test_prices_sharing_a_hash_are_grouped(store):
    product = _product("svc-a")
    twin = Price(**{**product.prices[0].__dict__, "usd_amount": "3"})
    product.prices.append(twin)

    upserter = BatchUpserter(store)
    upserter.add(product)
    assert upserter.pending == 1
    upserter.flush()

    row = store.get_product(product.product_hash)
    assert len(row["prices"]) == 1
    assert [p["USD"] for p in row["prices"][product.prices[0].price_hash]] == ["1", "3"]


def test_flush_with_nothing_pending_writes_nothing(store):
    assert BatchUpserter(store).flush() == 0
    assert store.batches == []


def test_store_errors_are_wrapped():
    failing = FailingStore()
    upserter = BatchUpserter(failing, batch_size=5)
    upserter.add(_product("svc-a"))
    upserter.add(_product("svc-b"))

    with pytest.raises(StoreWriteFailure) as exc_info:
        upserter.flush()

    assert exc_info.value.batch_size == 2
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert failing.calls == 1


def test_unhashed_product_is_rejected(store):
    product = Product(sku="s-p", vendor_name="ibm", region="r", service="s", product_family="service")

    with pytest.raises(ValueError):
        BatchUpserter(store).add(product)


def test_batch_size_must_be_positive(store):
    with pytest.raises(ValueError):
        BatchUpserter(store, batch_size=0)
