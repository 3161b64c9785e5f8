import pytest
from pydantic import ValidationError

from catalog_pricing.utils.config_loader import DEFAULT_CONFIG_PATH, ScraperConfig, load_scraper_config


def test_bundled_config_loads():
    cfg = load_scraper_config(DEFAULT_CONFIG_PATH)

    assert [q.name for q in cfg.catalog.queries] == ["saas", "iaas"]
    assert cfg.catalog.chunk_size == 8
    assert cfg.store.batch_size == 1000
    assert cfg.pricing.country == "USA"


def test_empty_file_yields_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_scraper_config(path) == ScraperConfig()


def test_overrides_are_applied(tmp_path):
    path = tmp_path / "custom.yml"
    path.write_text(
        "catalog:\n"
        "  chunk_size: 4\n"
        "  queries:\n"
        "    - name: compute\n"
        "      q: 'kind:iaas active:true'\n"
        "      product_family: iaas\n"
        "store:\n"
        "  batch_size: 50\n"
        "output_dir: data/catalog\n",
        encoding="utf-8",
    )

    cfg = load_scraper_config(path)

    assert cfg.catalog.chunk_size == 4
    [query] = cfg.catalog.queries
    assert query.product_family == "iaas"
    assert query.account == "global"
    assert cfg.store.batch_size == 50
    assert cfg.output_dir == "data/catalog"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scraper_config(tmp_path / "nope.yml")


@pytest.mark.parametrize(
    "content",
    [
        "catalog:\n  chunk_size: 0\n",
        "store:\n  batch_size: 20000\n",
        "catalog:\n  queries:\n    - name: x\n      q: y\n      product_family: paas\n",
    ],
)
def test_invalid_values_raise(tmp_path, content):
    path = tmp_path / "bad.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValidationError):
        load_scraper_config(path)


def test_database_url_comes_from_environment(monkeypatch):
    cfg = ScraperConfig()

    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert cfg.store.database_url() is None

    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/pricing")
    assert cfg.store.database_url() == "postgresql://u:p@localhost/pricing"
