import pytest

from catalog_pricing.integrations.contracts.catalog import (
    Amount,
    CatalogKind,
    CatalogNode,
    Metric,
    TierPoint,
    next_kinds,
)
from catalog_pricing.integrations.contracts.products import Price, Product, TierModel


def test_from_resource_reads_group_and_tags():
    node = CatalogNode.from_resource(
        {"id": "grp-1", "name": "Databases", "kind": "service", "group": True, "geo_tags": ["us-south"]}
    )

    assert node.kind is CatalogKind.SERVICE
    assert node.is_group is True
    assert node.geo_tags == ["us-south"]
    assert node.children == []


@pytest.mark.parametrize("resource", [{"kind": "service"}, {"id": "x", "kind": "runtime"}])
def test_from_resource_rejects_missing_id_or_unknown_kind(resource):
    with pytest.raises(ValueError):
        CatalogNode.from_resource(resource)


@pytest.mark.parametrize(
    "kind, is_group, expected",
    [
        (CatalogKind.SERVICE, False, (CatalogKind.PLAN,)),
        (CatalogKind.PLAN, False, (CatalogKind.DEPLOYMENT,)),
        (CatalogKind.DEPLOYMENT, False, ()),
        (CatalogKind.IAAS, False, (CatalogKind.IAAS, CatalogKind.PLAN)),
        (CatalogKind.SERVICE, True, (CatalogKind.SERVICE,)),
        (CatalogKind.IAAS, True, (CatalogKind.IAAS,)),
        (CatalogKind.GROUP, False, (CatalogKind.SERVICE, CatalogKind.IAAS)),
    ],
)
def test_kind_transitions(kind, is_group, expected):
    assert next_kinds(kind, is_group) == expected


def test_amount_for_prefers_the_last_matching_bucket():
    first = Amount("USA", "USD", (TierPoint(1.0, 1),))
    second = Amount("USA", "USD", (TierPoint(2.0, 1),))
    metric = Metric(metric_id="m", amounts=(first, Amount("GBR", "GBP", ()), second))

    assert metric.amount_for("USA", "USD") is second
    assert metric.amount_for("DEU", "EUR") is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Step Tier", TierModel.STEP_TIER),
        ("StepTier", TierModel.STEP_TIER),
        ("granular_tier", TierModel.GRANULAR_TIER),
        ("Linear", TierModel.LINEAR),
        ("unheard-of", None),
        (None, None),
    ],
)
def test_tier_model_parse(raw, expected):
    assert TierModel.parse(raw) is expected


def test_product_row_groups_prices_by_hash():
    price = Price(
        unit="HOURS",
        purchase_option="1",
        tier_model=TierModel.LINEAR,
        usd_amount="0.5",
        start_usage_amount="0",
        end_usage_amount="Inf",
        effective_date_start="2024-01-01",
        country="USA",
        currency="USD",
        part_number="part-1",
        price_hash="h1",
    )
    product = Product(
        sku="svc-plan",
        vendor_name="ibm",
        region="us-south",
        service="svc",
        product_family="service",
        attributes={"planName": "plan"},
        prices=[price],
        product_hash="p1",
    )

    row = product.to_row()

    assert row["productHash"] == "p1"
    assert row["vendorName"] == "ibm"
    assert list(row["prices"]) == ["h1"]
    serialized = row["prices"]["h1"][0]
    assert serialized["USD"] == "0.5"
    assert serialized["tierModel"] == "Linear"
    assert serialized["partNumber"] == "part-1"
    assert serialized["endUsageAmount"] == "Inf"
