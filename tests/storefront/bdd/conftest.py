"""Shared BDD fixtures and step definitions for the storefront."""

from pytest_bdd import given, parsers

from storefront.service.fake_adapter import FakeStorefrontService


# ---------------------------------------------------------------------------
# Service Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the order service will assign order id {order_id:d}"), target_fixture="fake_service")
def _service_with_order_ids(order_id):
    return FakeStorefrontService(first_order_id=order_id)


@given(parsers.cfparse('the order authority moved order {order_id:d} to "{status}"'))
def _authority_moved(fake_service, order_id, status):
    fake_service.advance_status(order_id, status)

