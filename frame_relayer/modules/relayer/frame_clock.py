import logging

from requests.exceptions import RequestException
from web3.exceptions import Web3Exception
from web3_multi_provider import NoActiveProviderError

from frame_relayer.metrics.prometheus.basic import FRAME_SLOT
from frame_relayer.modules.relayer.exceptions import UpstreamUnavailable
from frame_relayer.modules.relayer.types import ChainConfig, CurrentFrame
from frame_relayer.providers.execution.contracts.hash_consensus import HashConsensusContract
from frame_relayer.types import SlotNumber

logger = logging.getLogger(__name__)

UPSTREAM_ERRORS = (Web3Exception, RequestException, NoActiveProviderError)


def next_frame_slot(ref_slot: SlotNumber, frame_length_slots: int) -> SlotNumber:
    return SlotNumber(ref_slot + frame_length_slots)


def get_frame_length(hash_consensus: HashConsensusContract, chain_config: ChainConfig) -> int:
    """Frame length in slots. Constant for the deployment, so it is read once on startup."""
    frame_config = hash_consensus.get_frame_config()
    return frame_config.epochs_per_frame * chain_config.slots_per_epoch


class FrameClock:
    """
    Reads reporting frame boundaries from HashConsensus.
    Frames are never cached: the protocol may move to the next frame at any moment.
    """

    def __init__(self, hash_consensus: HashConsensusContract, frame_length_slots: int):
        self.hash_consensus = hash_consensus
        self.frame_length_slots = frame_length_slots

    def get_current_frame(self) -> CurrentFrame:
        try:
            frame = self.hash_consensus.get_current_frame()
        except UPSTREAM_ERRORS as error:
            raise UpstreamUnavailable(f'Failed to read current frame from {self.hash_consensus.address}.') from error

        FRAME_SLOT.labels('ref').set(frame.ref_slot)
        FRAME_SLOT.labels('deadline').set(frame.report_processing_deadline_slot)
        return frame

    def next_frame_slot(self, ref_slot: SlotNumber) -> SlotNumber:
        slot = next_frame_slot(ref_slot, self.frame_length_slots)
        FRAME_SLOT.labels('next').set(slot)
        return slot
