import logging

from frame_relayer import variables
from frame_relayer.modules.relayer.exceptions import IncompatibleException
from frame_relayer.modules.relayer.frame_clock import get_frame_length
from frame_relayer.modules.relayer.types import ChainConfig, RelayerConfig
from frame_relayer.providers.consensus.types import BeaconSpecResponse
from frame_relayer.web3py.types import Web3

logger = logging.getLogger(__name__)


def build_relayer_config(w3: Web3) -> RelayerConfig:
    """
    Resolves everything the relayer needs before the first cycle.
    Any upstream error here is fatal.
    """
    hash_consensus = w3.relayer_contracts.hash_consensus
    succinct_oracle = w3.relayer_contracts.succinct_oracle

    if not succinct_oracle.is_deployed():
        raise IncompatibleException(f'Succinct oracle is not deployed at {succinct_oracle.address}.')

    chain_config = hash_consensus.get_chain_config()
    check_chain_config(chain_config, w3.cc.get_config_spec())

    frame_length_slots = get_frame_length(hash_consensus, chain_config)
    if frame_length_slots <= 0:
        raise IncompatibleException(f'Frame length should be positive. Got {frame_length_slots} slots.')

    submit_enabled = variables.SUBMIT_REQUESTS and variables.ACCOUNT is not None
    if variables.SUBMIT_REQUESTS and variables.ACCOUNT is None:
        logger.warning({'msg': 'SUBMIT_REQUESTS is set, but RELAYER_PRIV_KEY is not. Run in dry mode.'})

    config = RelayerConfig(
        hash_consensus=hash_consensus,
        succinct_oracle=succinct_oracle,
        frame_length_slots=frame_length_slots,
        seconds_per_slot=chain_config.seconds_per_slot,
        gas_budget=variables.REQUEST_GAS_BUDGET,
        submit_enabled=submit_enabled,
        account=variables.ACCOUNT,
    )

    logger.info({
        'msg': 'Relayer config resolved.',
        'frame_length_slots': config.frame_length_slots,
        'seconds_per_slot': config.seconds_per_slot,
        'gas_budget': config.gas_budget,
        'submit_enabled': config.submit_enabled,
    })
    return config


def check_chain_config(chain_config: ChainConfig, cc_spec: BeaconSpecResponse):
    if (
        chain_config.seconds_per_slot == cc_spec.SECONDS_PER_SLOT
        and chain_config.slots_per_epoch == cc_spec.SLOTS_PER_EPOCH
    ):
        return

    raise IncompatibleException(
        'Contract chain config is not compatible with Beacon chain.\n'
        f'Contract config: {chain_config}\n'
        f'Beacon chain config: {cc_spec}'
    )
