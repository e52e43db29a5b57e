import logging

from web3.contract.contract import ContractFunction
from web3.types import BlockIdentifier

from frame_relayer.modules.relayer.types import ReportStatus
from frame_relayer.providers.execution.base_interface import ContractInterface
from frame_relayer.types import SlotNumber

logger = logging.getLogger(__name__)


class SuccinctLidoOracleContract(ContractInterface):
    abi_path = './assets/SuccinctLidoOracle.json'

    def get_report_status(self, ref_slot: SlotNumber, block_identifier: BlockIdentifier = 'latest') -> ReportStatus:
        """
        Returns whether a report for the reference slot was requested and whether it was received.
        """
        response = self.functions.reports(ref_slot).call(block_identifier=block_identifier)
        requested, received = response[0], response[1]
        status = ReportStatus(requested=requested, received=received)

        logger.info({
            'msg': f'Call `reports({ref_slot})`.',
            'value': status,
            'block_identifier': repr(block_identifier),
            'to': self.address,
        })

        return status

    def request_update(self, block_root: bytes, ref_slot: SlotNumber, callback_gas_limit: int) -> ContractFunction:
        """
        Requests a report for the reference slot.

        block_root: Root of the first non-missed beacon block at or after the reference slot.
        ref_slot: Reference slot of the current frame.
        callback_gas_limit: Gas the oracle is allowed to spend on the fulfillment callback.
        """
        tx = self.functions.requestUpdate(block_root, ref_slot, callback_gas_limit)

        logger.info({
            'msg': f'Build `requestUpdate({block_root.hex()}, {ref_slot}, {callback_gas_limit})` tx.',
        })

        return tx
