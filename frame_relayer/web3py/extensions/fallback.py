from typing import Any

from web3 import Web3
from web3.types import RPCEndpoint
from web3_multi_provider import FallbackProvider

from frame_relayer.providers.consistency import ProviderConsistencyModule


class FallbackProviderModule(ProviderConsistencyModule, FallbackProvider):
    """Execution client provider that switches to the next endpoint if current one fails."""

    def get_all_providers(self) -> list[Any]:
        return self._providers  # type: ignore[attr-defined]

    def _get_chain_id_with_provider(self, provider_index: int) -> int:
        provider = self.get_all_providers()[provider_index]
        response = provider.make_request(RPCEndpoint('eth_chainId'), [])

        if 'result' not in response:
            raise ValueError(f'Unexpected eth_chainId response: {response}')

        return Web3.to_int(hexstr=response['result'])
