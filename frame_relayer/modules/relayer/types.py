from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from eth_account.signers.local import LocalAccount

from frame_relayer.providers.consensus.types import BlockHeaderMessage
from frame_relayer.types import SlotNumber

if TYPE_CHECKING:
    from frame_relayer.providers.execution.contracts.hash_consensus import HashConsensusContract
    from frame_relayer.providers.execution.contracts.succinct_oracle import SuccinctLidoOracleContract


@dataclass(frozen=True)
class ChainConfig:
    # Order is important!
    slots_per_epoch: int
    seconds_per_slot: int
    genesis_time: int


@dataclass(frozen=True)
class FrameConfig:
    # Order is important!
    initial_epoch: int
    epochs_per_frame: int
    fast_lane_length_slots: int


@dataclass(frozen=True)
class CurrentFrame:
    # Order is important!
    ref_slot: SlotNumber
    report_processing_deadline_slot: SlotNumber


@dataclass(frozen=True)
class ReportStatus:
    requested: bool
    received: bool


class GateDecision(Enum):
    """Outcome of the request gate for a single frame"""
    NOOP_FULFILLED = 'noop_fulfilled'
    NOOP_AWAITING = 'noop_awaiting'
    SKIP_PAST_DEADLINE = 'skip_past_deadline'
    SUBMIT = 'submit'


@dataclass(frozen=True)
class Action:
    decision: GateDecision
    # Anchor header. Set only for SUBMIT decision
    header: BlockHeaderMessage | None = None


@dataclass(frozen=True)
class RelayerConfig:
    """Everything the relayer needs, resolved once before the first cycle."""
    hash_consensus: 'HashConsensusContract'
    succinct_oracle: 'SuccinctLidoOracleContract'
    frame_length_slots: int
    seconds_per_slot: int
    gas_budget: int
    submit_enabled: bool
    account: LocalAccount | None
