import os
import socket
from typing import Final, Generator
from unittest.mock import Mock, patch

import pytest
from eth_tester import EthereumTester
from eth_tester.backends.mock import MockBackend
from web3 import EthereumTesterProvider

from frame_relayer import variables
from frame_relayer.providers.execution.base_interface import ContractInterface
from frame_relayer.web3py.extensions import (
    ConsensusClientModule,
    FallbackProviderModule,
    RelayerContracts,
    TransactionUtils,
)
from frame_relayer.web3py.types import Web3

UNIT_MARKER = 'unit'
INTEGRATION_MARKER = 'integration'

DUMMY_ADDRESS = "0x0000000000000000000000000000000000000000"

# Holesky deployment, used by integration tests only
TESTNET_LIDO_LOCATOR_ADDRESS: Final = os.getenv('TESTNET_LIDO_LOCATOR_ADDRESS', '0x28FAB2059C713A7F9D8c86Db49f9bb0e96Af1ef8')


@pytest.fixture(autouse=True)
def check_test_marks_compatibility(request):
    all_test_markers = {x.name for x in request.node.iter_markers()}

    if not all_test_markers:
        pytest.fail('Test must be marked.')

    elif {UNIT_MARKER, INTEGRATION_MARKER} <= all_test_markers:
        pytest.fail('Test can not be both unit and integration at the same time.')


@pytest.fixture(autouse=True)
def configure_unit_tests(request):
    if request.node.get_closest_marker(UNIT_MARKER):

        def blocked_connect(*args, **kwargs):
            msg = (
                'Network access deprecated in unit test! '
                'Use mocks instead of real network calls. '
                f'Attempted connection: args={args}, kwargs={kwargs}'
            )
            pytest.fail(msg)

        with patch.object(socket.socket, 'connect', blocked_connect):
            yield
    else:
        yield


@pytest.fixture(autouse=True)
def configure_integration_tests(request, monkeypatch):
    if request.node.get_closest_marker(INTEGRATION_MARKER):
        if not all(x[0] for x in [variables.CONSENSUS_CLIENT_URI, variables.EXECUTION_CLIENT_URI]):
            pytest.fail('CONSENSUS_CLIENT_URI and EXECUTION_CLIENT_URI must be set in order to run integration tests.')

        # Works only if module fully imported, e.g.
        # "from frame_relayer import variables" not "from frame_relayer.variables import <ENV>"
        monkeypatch.setattr(variables, 'LIDO_LOCATOR_ADDRESS', TESTNET_LIDO_LOCATOR_ADDRESS)

    yield


def create_contract_mock(*args, **kwargs):
    """
    Contract mock that returns mock objects for all contract method calls.
    If a test requires a specific value, configure the return value for that method in the test.
    """
    contract_factory_class = kwargs.get('ContractFactoryClass', ContractInterface)

    mock_contract = Mock(spec=contract_factory_class)
    mock_contract.address = kwargs.get('address', DUMMY_ADDRESS)
    mock_contract.abi = contract_factory_class.load_abi(contract_factory_class.abi_path)

    return mock_contract


@pytest.fixture()
def web3(monkeypatch) -> Generator[Web3, None, None]:
    mock_backend = MockBackend()
    tester = EthereumTester(backend=mock_backend)
    w3 = Web3(provider=EthereumTesterProvider(tester))

    monkeypatch.setattr(variables, 'LIDO_LOCATOR_ADDRESS', DUMMY_ADDRESS)
    monkeypatch.setattr(variables, 'SUCCINCT_ORACLE_ADDRESS', DUMMY_ADDRESS)

    w3.eth.contract = create_contract_mock

    # Both chains are the same one in tests
    w3.attach_modules({'source': lambda: w3})  # type: ignore[dict-item]
    w3.attach_modules(
        {
            # Mocked on the contract level, see create_contract_mock
            'relayer_contracts': RelayerContracts,
            'transaction': TransactionUtils,
            # Modules relying on network level highly - mocked fully
            'cc': lambda: Mock(spec=ConsensusClientModule),
        }
    )

    yield w3


@pytest.fixture()
def web3_integration() -> Generator[Web3, None, None]:
    w3 = Web3(
        FallbackProviderModule(
            variables.EXECUTION_CLIENT_URI,
            request_kwargs={'timeout': variables.HTTP_REQUEST_TIMEOUT_EXECUTION},
        )
    )

    w3.attach_modules({'source': lambda: w3})  # type: ignore[dict-item]
    w3.attach_modules(
        {
            'relayer_contracts': RelayerContracts,
            'transaction': TransactionUtils,
            'cc': lambda: ConsensusClientModule(variables.CONSENSUS_CLIENT_URI, w3),
        }
    )

    yield w3
