from frame_relayer.web3py.extensions.tx_utils import TransactionUtils
from frame_relayer.web3py.extensions.consensus import ConsensusClientModule
from frame_relayer.web3py.extensions.contracts import RelayerContracts
from frame_relayer.web3py.extensions.fallback import FallbackProviderModule
