import importlib

import pytest


@pytest.mark.parametrize(
    "package",
    [
        "catalog_pricing.database",
        "catalog_pricing.integrations.clients",
        "catalog_pricing.processors",
        "catalog_pricing.scrapers",
        "catalog_pricing.utils",
    ],
)
def test_subpackages_are_regular_packages(package):
    module = importlib.import_module(package)

    # Namespace packages have no __file__ and are skipped by packages.find.
    assert module.__file__ is not None
    assert module.__file__.endswith("__init__.py")


def test_scrapers_package_exports_tree_walker():
    from catalog_pricing.scrapers import TreeWalker
    from catalog_pricing.scrapers.tree_walker import TreeWalker as Direct

    assert TreeWalker is Direct
