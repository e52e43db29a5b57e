import logging

from eth_typing import ChecksumAddress
from web3.types import BlockIdentifier

from frame_relayer.providers.execution.base_interface import ContractInterface


logger = logging.getLogger(__name__)


class LidoLocatorContract(ContractInterface):
    abi_path = './assets/LidoLocator.json'

    def accounting_oracle(self, block_identifier: BlockIdentifier = 'latest') -> ChecksumAddress:
        response = self.functions.accountingOracle().call(block_identifier=block_identifier)

        logger.debug({
            'msg': 'Call `accountingOracle()`.',
            'value': response,
            'block_identifier': repr(block_identifier),
            'to': self.address,
        })
        return response
