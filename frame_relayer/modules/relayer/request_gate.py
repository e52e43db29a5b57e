import logging

from frame_relayer.metrics.prometheus.basic import GATE_DECISIONS
from frame_relayer.metrics.prometheus.duration_meter import duration_meter
from frame_relayer.modules.relayer.header_resolver import HeaderResolver
from frame_relayer.modules.relayer.types import Action, CurrentFrame, GateDecision, RelayerConfig
from frame_relayer.providers.consensus.types import BlockHeaderMessage
from frame_relayer.types import SlotNumber
from frame_relayer.utils.block_header_root import compute_block_header_root
from frame_relayer.web3py.types import Web3

logger = logging.getLogger(__name__)


class RequestGate:
    """
    Decides what to do with a frame and sends the report request if needed.

    Only one request per frame is ever valid. The oracle status read at the start of every
    decision is the source of truth, result of the sent transaction is only logged.
    """

    def __init__(self, w3: Web3, config: RelayerConfig, resolver: HeaderResolver):
        self.w3 = w3
        self.config = config
        self.resolver = resolver

    @duration_meter()
    def process_frame(self, frame: CurrentFrame, finalized_slot: SlotNumber) -> Action:
        action = self.decide(frame.ref_slot, frame.report_processing_deadline_slot, finalized_slot)
        self.act(action, frame.ref_slot)
        return action

    def decide(self, ref_slot: SlotNumber, deadline_slot: SlotNumber, finalized_slot: SlotNumber) -> Action:
        status = self.config.succinct_oracle.get_report_status(ref_slot)

        if status.received:
            return Action(GateDecision.NOOP_FULFILLED)

        if status.requested:
            return Action(GateDecision.NOOP_AWAITING)

        if finalized_slot >= deadline_slot:
            return Action(GateDecision.SKIP_PAST_DEADLINE)

        header = self.resolver.find_first_available_header(ref_slot, finalized_slot)
        return Action(GateDecision.SUBMIT, header)

    def act(self, action: Action, ref_slot: SlotNumber) -> None:
        GATE_DECISIONS.labels(action.decision.value).inc()

        match action.decision:
            case GateDecision.NOOP_FULFILLED:
                logger.info({'msg': f'Report for ref slot {ref_slot} is already received.'})
            case GateDecision.NOOP_AWAITING:
                logger.info({'msg': f'Report for ref slot {ref_slot} is already requested. Waiting for fulfillment.'})
            case GateDecision.SKIP_PAST_DEADLINE:
                logger.info({'msg': f'Finalized slot is past deadline slot for ref slot {ref_slot}. Skip the frame.'})
            case GateDecision.SUBMIT:
                assert action.header is not None
                self._request_update(action.header, ref_slot)

    def _request_update(self, header: BlockHeaderMessage, ref_slot: SlotNumber) -> None:
        block_root = compute_block_header_root(header)

        logger.info({
            'msg': 'Requesting update.',
            'block_root': block_root,
            'anchor_slot': header.slot,
            'ref_slot': ref_slot,
            'gas_budget': self.config.gas_budget,
        })

        if not self.config.submit_enabled:
            logger.info({'msg': 'Request submission is disabled. Set SUBMIT_REQUESTS=true to send requests.'})
            return

        tx = self.config.succinct_oracle.request_update(block_root, ref_slot, self.config.gas_budget)
        self.w3.transaction.check_and_send_transaction(tx, self.config.account)
