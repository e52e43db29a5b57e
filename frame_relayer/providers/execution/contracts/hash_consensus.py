import logging

from web3.types import BlockIdentifier

from frame_relayer.modules.relayer.types import ChainConfig, CurrentFrame, FrameConfig
from frame_relayer.providers.execution.base_interface import ContractInterface

logger = logging.getLogger(__name__)


class HashConsensusContract(ContractInterface):
    abi_path = './assets/HashConsensus.json'

    def get_chain_config(self, block_identifier: BlockIdentifier = 'latest') -> ChainConfig:
        """
        Returns the immutable chain parameters required to calculate epoch and slot
        given a timestamp.
        """
        response = self.functions.getChainConfig().call(block_identifier=block_identifier)
        response = ChainConfig(*response)

        logger.info({
            'msg': 'Call `getChainConfig()`.',
            'value': response,
            'block_identifier': repr(block_identifier),
            'to': self.address,
        })

        return response

    def get_current_frame(self, block_identifier: BlockIdentifier = 'latest') -> CurrentFrame:
        """
        Returns the current reporting frame.

        ref_slot The frame's reference slot: if the data the consensus is being reached upon
                 includes or depends on any onchain state, this state should be queried at the
                 reference slot. If the slot contains a block, the state should include all changes
                 from that block.

        report_processing_deadline_slot: The last slot at which the report can be processed
                                         by the report processor contract.
        """
        response = self.functions.getCurrentFrame().call(block_identifier=block_identifier)
        response = CurrentFrame(*response)

        logger.info({
            'msg': 'Call `getCurrentFrame()`.',
            'value': response,
            'block_identifier': repr(block_identifier),
            'to': self.address,
        })

        return response

    def get_frame_config(self, block_identifier: BlockIdentifier = 'latest') -> FrameConfig:
        """
        Returns the time-related configuration.

        initialEpoch Epoch of the frame with zero index.
        epochsPerFrame Length of a frame in epochs.
        fastLaneLengthSlots Length of the fast lane interval in slots.
        """
        response = self.functions.getFrameConfig().call(block_identifier=block_identifier)
        response = FrameConfig(*response)

        logger.info({
            'msg': 'Call `getFrameConfig()`.',
            'value': response,
            'block_identifier': repr(block_identifier),
            'to': self.address,
        })

        return response
