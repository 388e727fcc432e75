import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def batching_bed():
    from batching.domain import batching

    bed = DomainFixture(batching)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(batching_bed):
    from batching.locks import order_locks
    from batching.wallet import reset_wallet

    with batching_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_wallet()
    order_locks.reset()


@pytest.fixture()
def wallet():
    from batching.wallet import get_wallet

    return get_wallet()
