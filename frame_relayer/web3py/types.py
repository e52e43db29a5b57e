from web3 import Web3 as _Web3

from frame_relayer.web3py.extensions import (
    ConsensusClientModule,
    RelayerContracts,
    TransactionUtils,
)


class Web3(_Web3):
    # Connection to the chain where the reporting protocol is deployed
    source: _Web3
    relayer_contracts: RelayerContracts
    transaction: TransactionUtils
    cc: ConsensusClientModule
