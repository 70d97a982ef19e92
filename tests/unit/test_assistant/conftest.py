import pytest

from assistant.config import AssistantSettings
from assistant.decision import DecisionStep
from assistant.dispatcher import ActionDispatcher
from assistant.graph import build_graph
from assistant.runner import AssistantRunner
from features.company import CompanyService
from features.order import OrderService
from features.product import ProductService
from features.progress import ProgressReporter

from fakes import (
    ACCOUNT_ID,
    FakeAuthenticator,
    FakeCompanyRepo,
    FakeOrderRepo,
    FakeProductRepo,
    FakeProgressRepo,
    ScriptedChatModel,
)


@pytest.fixture
def company_repo():
    return FakeCompanyRepo({
        ACCOUNT_ID: [
            {"company_id": "co-acme-dist", "name": "Acme Distribution"},
            {"company_id": "co-luxe", "name": "Luxe Beauty Gallery"},
            {"company_id": "co-acme", "name": "Acme Corp"},
        ],
        "acct-other": [
            {"company_id": "co-foreign", "name": "Foreign Traders"},
        ],
    })


@pytest.fixture
def product_repo():
    return FakeProductRepo({
        ACCOUNT_ID: [
            {"product_id": "p-serum", "name": "Anti-aging Serum", "price": 20},
            {"product_id": "p-sk001", "name": "SK001", "price": 3},
        ],
        "acct-other": [
            {"product_id": "p-foreign", "name": "Foreign Serum", "price": 1},
        ],
    })


@pytest.fixture
def order_repo():
    return FakeOrderRepo()


@pytest.fixture
def progress_repo():
    return FakeProgressRepo()


@pytest.fixture
def dispatcher(company_repo, product_repo, order_repo):
    return ActionDispatcher(
        company_service=CompanyService(company_repo),
        product_service=ProductService(product_repo),
        order_service=OrderService(order_repo, company_repo, product_repo),
    )


@pytest.fixture
def reporter(progress_repo):
    reporter = ProgressReporter(repo=progress_repo, max_workers=2)
    yield reporter
    reporter.shutdown()


@pytest.fixture
def make_graph(dispatcher, reporter):
    def _make(model: ScriptedChatModel, max_iterations: int = 8):
        return build_graph(
            DecisionStep(model).decide,
            dispatcher,
            reporter=reporter,
            max_iterations=max_iterations,
        )

    return _make


@pytest.fixture
def make_runner(make_graph, reporter):
    def _make(model: ScriptedChatModel, max_iterations: int = 8) -> AssistantRunner:
        settings = AssistantSettings(max_iterations=max_iterations, run_timeout_seconds=None)
        return AssistantRunner(make_graph(model, max_iterations), reporter, FakeAuthenticator(), settings)

    return _make
