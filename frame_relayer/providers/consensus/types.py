from dataclasses import dataclass

from frame_relayer.types import BlockRoot, SlotNumber, StateRoot, ValidatorIndex
from frame_relayer.utils.dataclass import FromResponse, Nested


@dataclass
class BeaconSpecResponse(FromResponse):
    DEPOSIT_CHAIN_ID: int
    SLOTS_PER_EPOCH: int
    SECONDS_PER_SLOT: int

    def __post_init__(self):
        # Beacon API returns all config values as strings
        self.DEPOSIT_CHAIN_ID = int(self.DEPOSIT_CHAIN_ID)
        self.SLOTS_PER_EPOCH = int(self.SLOTS_PER_EPOCH)
        self.SECONDS_PER_SLOT = int(self.SECONDS_PER_SLOT)


@dataclass
class BlockHeaderMessage(FromResponse):
    slot: SlotNumber
    proposer_index: ValidatorIndex
    parent_root: BlockRoot
    state_root: StateRoot
    body_root: str

    def __post_init__(self):
        # uint64 values come as strings
        self.slot = SlotNumber(int(self.slot))
        self.proposer_index = ValidatorIndex(int(self.proposer_index))


@dataclass
class BlockHeader(Nested, FromResponse):
    message: BlockHeaderMessage
    signature: str


@dataclass
class BlockHeaderResponseData(Nested, FromResponse):
    # https://ethereum.github.io/beacon-APIs/#/Beacon/getBlockHeader
    root: BlockRoot
    canonical: bool
    header: BlockHeader


@dataclass
class BlockHeaderFullResponse(Nested, FromResponse):
    # https://ethereum.github.io/beacon-APIs/#/Beacon/getBlockHeader
    execution_optimistic: bool
    data: BlockHeaderResponseData
    finalized: bool | None = None
