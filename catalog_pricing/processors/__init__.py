"""
Pricing normalization and product mapping
"""
from .pricing_normalizer import extract_prices, parse_pricing_leaf
from .product_mapper import map_tree_to_products

__all__ = ['extract_prices', 'parse_pricing_leaf', 'map_tree_to_products']
