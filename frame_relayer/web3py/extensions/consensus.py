import logging

from web3 import Web3
from web3.module import Module

from frame_relayer import variables
from frame_relayer.providers.consensus.client import ConsensusClient

logger = logging.getLogger(__name__)


class ConsensusClientModule(ConsensusClient, Module):
    """Beacon API client attached to web3 as `w3.cc`. Hosts are tried in the given order."""

    def __init__(self, hosts: list[str], w3: Web3):
        Module.__init__(self, w3)
        ConsensusClient.__init__(
            self,
            hosts,
            request_timeout=variables.HTTP_REQUEST_TIMEOUT_CONSENSUS,
            retry_total=variables.HTTP_REQUEST_RETRY_COUNT_CONSENSUS,
            retry_backoff_factor=variables.HTTP_REQUEST_SLEEP_BEFORE_RETRY_IN_SECONDS_CONSENSUS,
        )
        logger.info({'msg': 'Consensus client initialized.', 'hosts_count': len(hosts)})
