"""
Pricing leaf parsing and flattening.

A plan or deployment's pricing describes one or more charge models (metrics).
Each metric names a tier model, a unit, a quantity and a part number, and
carries an ``amounts`` list with one bucket per country-currency. A bucket is
an ordered list of (price, quantity_tier) points; each point's quantity tier
is the upper bound of that tier.

    pricing
    - type, deployment_location
    - metrics []
      - metric_id (part number), tier_model, charge_unit*, effective dates
      - amounts [] (by country and currency)
        - prices [] (price, quantity_tier)

``extract_prices`` turns one country-currency slice of that structure into
flat Price rows.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from catalog_pricing.error_handler import MalformedPricingLeaf
from catalog_pricing.integrations.contracts.catalog import Amount, Metric, PricingLeaf, TierPoint
from catalog_pricing.integrations.contracts.products import INFINITE_USAGE, Price, TierModel

logger = logging.getLogger(__name__)

# The catalog encodes "no upper bound" as a long run of nines (999999999, 9999999990, ...).
UNBOUNDED_TIER_PATTERN = re.compile(r"9{9,}")


def format_amount(value: Any) -> str:
    """Render a numeric amount as a decimal string; integral floats drop their '.0'."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_tier_boundary(value: Any) -> str:
    boundary = format_amount(value)
    if UNBOUNDED_TIER_PATTERN.search(boundary):
        return INFINITE_USAGE
    return boundary


def _parse_tier_point(raw: Any) -> TierPoint:
    if not isinstance(raw, dict):
        raise ValueError(f"tier point is not an object: {raw!r}")
    price = raw.get("price")
    quantity_tier = raw.get("quantity_tier")
    if price is None or quantity_tier is None:
        raise ValueError("tier point needs both price and quantity_tier")
    return TierPoint(price=price, quantity_tier=quantity_tier)


def _parse_amounts(raw_amounts: Any) -> List[Amount]:
    if raw_amounts is None:
        return []
    if not isinstance(raw_amounts, list):
        raise ValueError("amounts is not a list")
    amounts: List[Amount] = []
    for raw in raw_amounts:
        if not isinstance(raw, dict):
            continue
        country = raw.get("country")
        currency = raw.get("currency")
        prices = raw.get("prices")
        if not country or not currency or not prices:
            continue
        if not isinstance(prices, list):
            raise ValueError(f"prices for {country}/{currency} is not a list")
        amounts.append(
            Amount(
                country=str(country),
                currency=str(currency),
                prices=tuple(_parse_tier_point(p) for p in prices),
            )
        )
    return amounts


def _parse_metric(raw: Dict[str, Any]) -> Optional[Metric]:
    metric_id = raw.get("metric_id")
    if not metric_id:
        return None
    return Metric(
        metric_id=str(metric_id),
        tier_model=raw.get("tier_model"),
        charge_unit=raw.get("charge_unit"),
        charge_unit_name=raw.get("charge_unit_name"),
        charge_unit_quantity=raw.get("charge_unit_quantity"),
        effective_from=raw.get("effective_from"),
        effective_until=raw.get("effective_until"),
        amounts=tuple(_parse_amounts(raw.get("amounts"))),
    )


def parse_pricing_leaf(payload: Any, node_id: str = "") -> Optional[PricingLeaf]:
    """
    Build a PricingLeaf from a ``GET /{id}/pricing`` payload.

    Returns None when the payload carries no metrics at all. Raises
    MalformedPricingLeaf when the payload is not an object or its metrics are
    not a list. A single malformed metric is dropped and logged; the rest of
    the leaf survives.
    """
    if not isinstance(payload, dict):
        raise MalformedPricingLeaf(node_id, "pricing payload is not an object")
    if "metrics" not in payload:
        return None
    raw_metrics = payload.get("metrics")
    if raw_metrics is None:
        raw_metrics = []
    if not isinstance(raw_metrics, list):
        raise MalformedPricingLeaf(node_id, "metrics is not a list")

    metrics: List[Metric] = []
    for raw in raw_metrics:
        if not isinstance(raw, dict):
            logger.warning("Dropping non-object metric on %s", node_id)
            continue
        try:
            metric = _parse_metric(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Dropping metric %s on %s: %s", raw.get("metric_id"), node_id, e)
            continue
        if metric is not None:
            metrics.append(metric)

    return PricingLeaf(
        type=str(payload.get("type") or ""),
        region=str(payload.get("deployment_location") or payload.get("region") or ""),
        metrics=tuple(metrics),
        deployment_id=payload.get("deployment_id"),
        deprecated=bool(payload.get("deprecated")),
    )


def extract_prices(
    leaf: PricingLeaf,
    country: str,
    currency: str,
    *,
    effective_date_default: str = "",
) -> List[Price]:
    """
    Flatten one country-currency slice of a pricing leaf into Price rows.

    Each tier starts where the previous one ended ("0" for the first) and
    tiers ending at the catalog's run-of-nines boundary end at "Inf". Metrics
    with no bucket for the requested geo contribute nothing. Hashes are left
    blank for the caller to stamp.
    """
    prices: List[Price] = []
    for metric in leaf.metrics:
        amount = metric.amount_for(country, currency)
        if amount is None or not amount.prices:
            continue

        tier_model = TierModel.STEP_TIER if len(amount.prices) > 1 else TierModel.LINEAR
        start_usage = "0"
        for point in amount.prices:
            end_usage = normalize_tier_boundary(point.quantity_tier)
            prices.append(
                Price(
                    unit=metric.charge_unit_name or "",
                    purchase_option=format_amount(metric.charge_unit_quantity)
                    if metric.charge_unit_quantity is not None
                    else "",
                    tier_model=tier_model,
                    usd_amount=format_amount(point.price),
                    start_usage_amount=start_usage,
                    end_usage_amount=end_usage,
                    effective_date_start=metric.effective_from or effective_date_default,
                    effective_date_end=metric.effective_until,
                    country=country,
                    currency=currency,
                    part_number=metric.metric_id,
                    description=metric.charge_unit,
                )
            )
            start_usage = end_usage
    return prices
