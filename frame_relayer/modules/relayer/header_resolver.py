import logging
from http import HTTPStatus

from frame_relayer import variables
from frame_relayer.metrics.prometheus.basic import MISSED_SLOTS
from frame_relayer.modules.relayer.exceptions import NoHeaderFound
from frame_relayer.providers.consensus.client import ConsensusClient
from frame_relayer.providers.consensus.types import BlockHeaderMessage
from frame_relayer.providers.http_provider import NotOkResponse
from frame_relayer.types import SlotNumber

logger = logging.getLogger(__name__)


class HeaderResolver:
    """
    Finds the anchor header of a frame: the first non-missed slot at or after the reference slot.
    """
    #  [ ] - slot
    #  [x] - slot with existed block
    #  [o] - slot with missed block
    #
    #  finalized = 24
    #  ref_slot = 19
    #
    #                ref_slot           finalized
    #                   |                   |
    #                   v                   v
    #   ---[o]-[x]-[x]-[o]-[o]-[o]-[o]-[x]-[x]----> time
    #      16  17  18  19  20  21  22  23  24       slot
    #
    #  Range [19, 24] is scanned from the left, 19-22 are missed, header of slot 23 is returned.
    #  Scan never goes past the upper bound, so caller has to pass the finalized slot there.

    def __init__(self, cc: ConsensusClient, retry_count: int = variables.HEADER_FETCH_RETRY_COUNT):
        self.cc = cc
        self.retry_count = retry_count

    def find_first_available_header(self, target_slot: SlotNumber, upper_bound_slot: SlotNumber) -> BlockHeaderMessage:
        logger.info({'msg': f'Get first non-missed slot in range [{target_slot}, {upper_bound_slot}].'})

        for slot in range(target_slot, upper_bound_slot + 1):
            header = self._get_header_or_none(SlotNumber(slot))
            if header is not None:
                logger.info({'msg': f'Resolved to slot: {header.slot}'})
                return header

        raise NoHeaderFound(f'No slots available in range [{target_slot}, {upper_bound_slot}]. Check your CL node.')

    def _get_header_or_none(self, slot: SlotNumber) -> BlockHeaderMessage | None:
        """
        None means there is no block in the slot.

        404 is a missed slot. Any other error is retried `retry_count` times and then the slot
        is treated as missed too, so a flaky node could make the scan skip a valid anchor.
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_count + 1):
            try:
                response = self.cc.get_block_header(slot)
            except NotOkResponse as error:
                if error.status == HTTPStatus.NOT_FOUND:
                    logger.warning({'msg': f'Missed slot: {slot}. Check next slot.'})
                    MISSED_SLOTS.labels('missed').inc()
                    return None
                last_error = error
            except (ValueError, TypeError) as error:
                # Malformed response. TypeError comes from missing fields
                last_error = error
            else:
                return response.data.header.message

            logger.warning({
                'msg': f'Failed to fetch header for slot: {slot}.',
                'attempt': attempt + 1,
                'error': str(last_error),
            })

        logger.warning({
            'msg': f'Header for slot {slot} is unavailable. Treat slot as missed.',
            'error': str(last_error),
        })
        MISSED_SLOTS.labels('unavailable').inc()
        return None
