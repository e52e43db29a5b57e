import ssz

from frame_relayer.providers.consensus.types import BlockHeaderMessage


class BeaconBlockHeader(ssz.Serializable):
    """
    https://github.com/ethereum/consensus-specs/blob/dev/specs/phase0/beacon-chain.md#beaconblockheader
    """
    fields = [
        ("slot", ssz.uint64),
        ("proposer_index", ssz.uint64),
        ("parent_root", ssz.bytes32),
        ("state_root", ssz.bytes32),
        ("body_root", ssz.bytes32),
    ]


def hex_str_to_bytes(hex_str: str) -> bytes:
    return bytes.fromhex(hex_str[2:]) if hex_str.startswith("0x") else bytes.fromhex(hex_str)


def compute_block_header_root(header: BlockHeaderMessage) -> bytes:
    """
    Block root of the header, i.e. `hash_tree_root(BeaconBlockHeader)`.
    Equals to the root the beacon node returns for the same block.
    """
    ssz_header = BeaconBlockHeader(
        header.slot,
        header.proposer_index,
        hex_str_to_bytes(header.parent_root),
        hex_str_to_bytes(header.state_root),
        hex_str_to_bytes(header.body_root),
    )
    return ssz.get_hash_tree_root(ssz_header)
