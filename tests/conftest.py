"""Pytest configuration and fixtures."""

import json

import httpx
import pytest

from pharmachain.config import Settings
from pharmachain.providers import LedgerClient, RegistryProvider

REGISTRY_URL = "https://registry.test/drug/ndc.json"
LEDGER_URL = "https://ledger.test/rpc"
CONTRACT = "0xc0ffee"


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that call the live openFDA API",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "network: mark test as requiring internet access")


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless --run-network is provided."""
    if config.getoption("--run-network"):
        return

    skip_network = pytest.mark.skip(reason="Need --run-network option to run live API tests")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


def ndc_record(brand="Aspirin", generic="aspirin", labeler="Pfizer Laboratories"):
    """openFDA NDC record with the fields the registry provider reads."""
    return {"brand_name": brand, "generic_name": generic, "labeler_name": labeler}


@pytest.fixture
def test_settings():
    """Settings isolated from the environment (offline ledger, no delays)."""
    return Settings(
        registry_url=REGISTRY_URL,
        ledger_rpc_url=LEDGER_URL,
        contract_address=None,
        registry_timeout=5.0,
        ledger_timeout=5.0,
        batch_delay=0.0,
    )


@pytest.fixture
def registry_factory():
    """Build a RegistryProvider whose HTTP traffic goes to a handler function."""

    def make(handler, timeout=5.0):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return RegistryProvider(url=REGISTRY_URL, timeout=timeout, client=client)

    return make


@pytest.fixture
def registry_found(registry_factory):
    """Registry that finds every NDC."""
    return registry_factory(lambda request: httpx.Response(200, json={"results": [ndc_record()]}))


@pytest.fixture
def registry_down(registry_factory):
    """Registry that cannot be reached."""

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return registry_factory(handler)


class FakeLedger:
    """In-memory JSON-RPC ledger node for MockTransport."""

    def __init__(self, authenticated=True, proof="zk-proof-blob", fail_methods=(), tx_id="tx-0001"):
        self.authenticated = authenticated
        self.proof = proof
        self.fail_methods = set(fail_methods)
        self.tx_id = tx_id
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        self.calls.append(body)
        if method in self.fail_methods:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": "boom"}}
            )
        if method == "contract_status":
            result = {"contract": body["params"]["contract"], "status": "active"}
        elif method == "verify_drug_authenticity":
            result = {"authenticated": self.authenticated, "proof": self.proof}
        elif method == "register_drug_batch":
            result = {"transactionId": self.tx_id}
        else:
            return httpx.Response(404)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def methods(self):
        return [c["method"] for c in self.calls]


@pytest.fixture
def fake_ledger():
    return FakeLedger()


@pytest.fixture
def ledger_client_factory():
    """Build a LedgerClient wired to a handler function."""

    def make(handler, contract=CONTRACT):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return LedgerClient(rpc_url=LEDGER_URL, contract_address=contract, timeout=5.0, client=client)

    return make
