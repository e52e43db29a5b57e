import logging

from eth_typing import ChecksumAddress
from web3.types import BlockIdentifier

from frame_relayer.providers.execution.base_interface import ContractInterface


logger = logging.getLogger(__name__)


class AccountingOracleContract(ContractInterface):
    abi_path = './assets/AccountingOracle.json'

    def get_consensus_contract(self, block_identifier: BlockIdentifier = 'latest') -> ChecksumAddress:
        """
        Returns the address of the HashConsensus contract.
        """
        response = self.functions.getConsensusContract().call(block_identifier=block_identifier)
        logger.debug({
            'msg': 'Call `getConsensusContract()`.',
            'value': response,
            'block_identifier': repr(block_identifier),
            'to': self.address,
        })
        return response
