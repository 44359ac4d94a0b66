import pytest
from protean.integrations.pytest import DomainFixture

from storefront.identity import get_identity_provider, reset_identity_provider
from storefront.payment.signer import MERCHANT_ID_ENV, MERCHANT_SECRET_ENV

MERCHANT_ID = "1211149"
MERCHANT_SECRET = "test-merchant-secret"


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()

    reset_identity_provider()


@pytest.fixture()
def merchant_env(monkeypatch):
    monkeypatch.setenv(MERCHANT_ID_ENV, MERCHANT_ID)
    monkeypatch.setenv(MERCHANT_SECRET_ENV, MERCHANT_SECRET)


@pytest.fixture()
def no_merchant_env(monkeypatch):
    monkeypatch.delenv(MERCHANT_ID_ENV, raising=False)
    monkeypatch.delenv(MERCHANT_SECRET_ENV, raising=False)


@pytest.fixture()
def identity_provider():
    return get_identity_provider()
