from catalog_pricing.integrations.contracts.catalog import (
    Amount,
    CatalogKind,
    CatalogNode,
    Metric,
    PricingLeaf,
    TierPoint,
)
from catalog_pricing.processors.product_mapper import build_attributes, map_tree_to_products
from catalog_pricing.utils.hashing import product_hash


def _leaf(region="", deployment_id=None, deprecated=False, country="USA", points=((1.0, 1),)):
    metric = Metric(
        metric_id="part-1",
        charge_unit_name="INSTANCE_HOURS",
        amounts=(
            Amount(
                country=country,
                currency="USD",
                prices=tuple(TierPoint(price=p, quantity_tier=q) for p, q in points),
            ),
        ),
    )
    return PricingLeaf(
        type="paid",
        region=region,
        metrics=(metric,),
        deployment_id=deployment_id,
        deprecated=deprecated,
    )


def _node(node_id, kind, children=(), leaves=(), name=None, is_group=False):
    return CatalogNode(
        id=node_id,
        name=name or node_id,
        kind=kind,
        is_group=is_group,
        children=list(children),
        pricing_leaves=list(leaves),
    )


def test_plan_and_deployment_leaves_become_products():
    plan = _node(
        "standard",
        CatalogKind.PLAN,
        leaves=[_leaf()],
        children=[
            _node("dep-us", CatalogKind.DEPLOYMENT, leaves=[_leaf("us-south", "dep-us")]),
            _node("dep-eu", CatalogKind.DEPLOYMENT, leaves=[_leaf("eu-de", "dep-eu")]),
        ],
    )
    service = _node("cloudant", CatalogKind.SERVICE, children=[plan])

    products = map_tree_to_products([service])

    assert [(p.sku, p.region) for p in products] == [
        ("cloudant-standard", "USA"),
        ("cloudant-standard", "us-south"),
        ("cloudant-standard", "eu-de"),
    ]
    assert all(p.service == "cloudant" and p.product_family == "service" for p in products)
    assert products[1].attributes == {
        "planName": "standard",
        "planType": "paid",
        "region": "us-south",
        "deploymentId": "dep-us",
    }
    assert products[1].product_hash == product_hash("ibm", "us-south", "cloudant-standard")
    assert all(price.price_hash for p in products for price in p.prices)


def test_deprecated_and_unpriced_leaves_are_skipped():
    plan = _node(
        "lite",
        CatalogKind.PLAN,
        children=[
            _node("old", CatalogKind.DEPLOYMENT, leaves=[_leaf("us-south", deprecated=True)]),
            _node("gbr", CatalogKind.DEPLOYMENT, leaves=[_leaf("eu-gb", country="GBR")]),
        ],
    )
    service = _node("cloudant", CatalogKind.SERVICE, children=[plan])

    assert map_tree_to_products([service]) == []


def test_plan_without_pricing_yields_nothing():
    service = _node("cloudant", CatalogKind.SERVICE, children=[_node("lite", CatalogKind.PLAN)])

    assert map_tree_to_products([service]) == []


def test_iaas_chain_uses_nearest_owner_and_iaas_family():
    plan = _node("paid", CatalogKind.PLAN, leaves=[_leaf()])
    child = _node("fip", CatalogKind.IAAS, name="is.floating-ip", children=[plan])
    root = _node("vpc", CatalogKind.IAAS, name="is.vpc", children=[child])

    [product] = map_tree_to_products([root])

    assert product.sku == "is.floating-ip-paid"
    assert product.service == "is.floating-ip"
    assert product.product_family == "iaas"


def test_group_nodes_pass_through_to_their_services():
    plan = _node("lite", CatalogKind.PLAN, leaves=[_leaf()])
    service = _node("svc-a", CatalogKind.SERVICE, children=[plan])
    group = _node("grp", CatalogKind.SERVICE, name="group-of-services", is_group=True, children=[service])

    [product] = map_tree_to_products([group])

    assert product.sku == "svc-a-lite"
    assert product.service == "svc-a"


def test_mapping_is_deterministic_for_same_tree():
    def tree():
        plan = _node("std", CatalogKind.PLAN, leaves=[_leaf(points=((1.0, 100), (0.5, 999999999)))])
        return _node("svc", CatalogKind.SERVICE, children=[plan])

    first = map_tree_to_products([tree()])
    second = map_tree_to_products([tree()])

    assert [p.to_row() for p in first] == [p.to_row() for p in second]


def test_build_attributes_without_deployment():
    assert build_attributes(_leaf("us-south"), "lite") == {
        "planName": "lite",
        "planType": "paid",
        "region": "us-south",
    }
