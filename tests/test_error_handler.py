import logging

import pytest

from catalog_pricing.error_handler import (
    CatalogHTTPError,
    ErrorHandler,
    NotFound,
    RateLimited,
    StoreWriteFailure,
)


def test_record_keeps_failure_details():
    eh = ErrorHandler()

    failure = eh.record("plan-1", "get_pricing", RateLimited("https://catalog.test/plan-1/pricing", 3))

    assert failure.node_id == "plan-1"
    assert failure.operation == "get_pricing"
    assert failure.error_type == "RateLimited"
    assert "after 3 attempts" in failure.error
    assert eh.count == 1


def test_expected_failures_log_warnings_and_others_log_errors(caplog):
    eh = ErrorHandler()

    with caplog.at_level(logging.WARNING, logger="catalog_pricing.error_handler"):
        eh.record("svc-1", "get_children:plan", CatalogHTTPError("https://catalog.test/svc-1/plan", 502))
        eh.record("svc-2", "get_children:plan", ZeroDivisionError("bad math"))

    levels = [(r.levelname, r.exc_info is not None) for r in caplog.records]
    assert levels == [("WARNING", False), ("ERROR", True)]


@pytest.mark.parametrize(
    "exc",
    [
        NotFound("https://catalog.test/svc-1/plan"),
        RateLimited("https://catalog.test/svc-1/plan", 3),
    ],
)
def test_missing_or_throttled_listing_is_an_expected_failure(exc, caplog):
    eh = ErrorHandler()

    with caplog.at_level(logging.WARNING, logger="catalog_pricing.error_handler"):
        eh.record("svc-1", "get_children:plan", exc)

    [record] = caplog.records
    assert record.levelname == "WARNING"
    assert record.exc_info is None
    assert eh.count == 1


def test_summary_counts_by_type():
    eh = ErrorHandler()
    eh.record("a", "get_pricing", CatalogHTTPError("u", 500))
    eh.record("b", "get_pricing", CatalogHTTPError("u", 503))
    eh.record("c", "list_roots", KeyError("count"))

    assert eh.summary() == {
        "error_count": 3,
        "by_type": {"CatalogHTTPError": 2, "KeyError": 1},
    }


def test_error_messages_name_the_resource():
    assert str(NotFound("https://catalog.test/x")) == "Not found: https://catalog.test/x"
    err = StoreWriteFailure(1000, RuntimeError("disk full"))
    assert err.batch_size == 1000
    assert "disk full" in str(err)
