from unittest.mock import Mock

import pytest

from frame_relayer import variables
from frame_relayer.modules.relayer.bootstrap import build_relayer_config, check_chain_config
from frame_relayer.modules.relayer.exceptions import IncompatibleException
from tests.factory.consensus import BeaconSpecResponseFactory
from tests.factory.relayer import ChainConfigFactory, FrameConfigFactory


@pytest.fixture
def contracts(web3):
    hash_consensus = web3.relayer_contracts.hash_consensus
    hash_consensus.get_chain_config.return_value = ChainConfigFactory.build()
    hash_consensus.get_frame_config.return_value = FrameConfigFactory.build(epochs_per_frame=225)
    web3.relayer_contracts.succinct_oracle.is_deployed.return_value = True
    web3.cc.get_config_spec.return_value = BeaconSpecResponseFactory.build()
    return web3.relayer_contracts


@pytest.mark.unit
def test_build_relayer_config(web3, contracts, monkeypatch):
    account = Mock()
    monkeypatch.setattr(variables, 'ACCOUNT', account)
    monkeypatch.setattr(variables, 'SUBMIT_REQUESTS', True)
    monkeypatch.setattr(variables, 'REQUEST_GAS_BUDGET', 300_000)

    config = build_relayer_config(web3)

    assert config.hash_consensus is contracts.hash_consensus
    assert config.succinct_oracle is contracts.succinct_oracle
    assert config.frame_length_slots == 7200
    assert config.seconds_per_slot == 12
    assert config.gas_budget == 300_000
    assert config.submit_enabled
    assert config.account is account


@pytest.mark.unit
@pytest.mark.parametrize(
    ('submit_requests', 'account', 'submit_enabled'),
    [
        (False, Mock(), False),
        (True, None, False),
        (False, None, False),
    ],
)
def test_dry_mode(web3, contracts, monkeypatch, submit_requests, account, submit_enabled):
    monkeypatch.setattr(variables, 'ACCOUNT', account)
    monkeypatch.setattr(variables, 'SUBMIT_REQUESTS', submit_requests)

    assert build_relayer_config(web3).submit_enabled == submit_enabled


@pytest.mark.unit
def test_oracle_is_not_deployed(web3, contracts):
    contracts.succinct_oracle.is_deployed.return_value = False

    with pytest.raises(IncompatibleException, match='not deployed'):
        build_relayer_config(web3)


@pytest.mark.unit
def test_zero_frame_length(web3, contracts):
    contracts.hash_consensus.get_frame_config.return_value = FrameConfigFactory.build(epochs_per_frame=0)

    with pytest.raises(IncompatibleException, match='Frame length'):
        build_relayer_config(web3)


@pytest.mark.unit
@pytest.mark.parametrize(
    ('slots_per_epoch', 'seconds_per_slot'),
    [
        (16, 12),
        (32, 6),
    ],
)
def test_chain_config_mismatch(slots_per_epoch, seconds_per_slot):
    chain_config = ChainConfigFactory.build(slots_per_epoch=slots_per_epoch, seconds_per_slot=seconds_per_slot)

    with pytest.raises(IncompatibleException):
        check_chain_config(chain_config, BeaconSpecResponseFactory.build())


@pytest.mark.unit
def test_chain_config_match():
    check_chain_config(ChainConfigFactory.build(), BeaconSpecResponseFactory.build())
