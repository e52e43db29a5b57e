import logging
from typing import cast

from web3 import Web3
from web3.module import Module

from frame_relayer import variables
from frame_relayer.providers.execution.contracts.accounting_oracle import AccountingOracleContract
from frame_relayer.providers.execution.contracts.hash_consensus import HashConsensusContract
from frame_relayer.providers.execution.contracts.lido_locator import LidoLocatorContract
from frame_relayer.providers.execution.contracts.succinct_oracle import SuccinctLidoOracleContract

logger = logging.getLogger(__name__)


class RelayerContracts(Module):
    """
    Reporting protocol contracts live on the source chain and are discovered through LidoLocator.
    Succinct oracle lives on the target chain.
    """
    w3: Web3

    lido_locator: LidoLocatorContract
    accounting_oracle: AccountingOracleContract
    hash_consensus: HashConsensusContract
    succinct_oracle: SuccinctLidoOracleContract

    def __init__(self, w3: Web3):
        super().__init__(w3)
        self._load_contracts()

    def _load_contracts(self):
        source = self.w3.source  # type: ignore[attr-defined]

        # Contract that stores all lido contract addresses
        self.lido_locator = cast(
            LidoLocatorContract,
            source.eth.contract(
                address=variables.LIDO_LOCATOR_ADDRESS,  # type: ignore
                ContractFactoryClass=LidoLocatorContract,
                decode_tuples=True,
            ),
        )

        self.accounting_oracle = cast(
            AccountingOracleContract,
            source.eth.contract(
                address=self.lido_locator.accounting_oracle(),
                ContractFactoryClass=AccountingOracleContract,
                decode_tuples=True,
            ),
        )

        self.hash_consensus = cast(
            HashConsensusContract,
            source.eth.contract(
                address=self.accounting_oracle.get_consensus_contract(),
                ContractFactoryClass=HashConsensusContract,
                decode_tuples=True,
            ),
        )

        self.succinct_oracle = cast(
            SuccinctLidoOracleContract,
            self.w3.eth.contract(
                address=variables.SUCCINCT_ORACLE_ADDRESS,  # type: ignore
                ContractFactoryClass=SuccinctLidoOracleContract,
                decode_tuples=True,
            ),
        )

        logger.info({
            'msg': 'Relayer contracts loaded.',
            'hash_consensus': self.hash_consensus.address,
            'succinct_oracle': self.succinct_oracle.address,
        })
