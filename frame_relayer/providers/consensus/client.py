import logging
from http import HTTPStatus
from typing import Literal

from frame_relayer.metrics.prometheus.basic import CL_REQUESTS_DURATION
from frame_relayer.providers.consensus.types import (
    BeaconSpecResponse,
    BlockHeaderFullResponse,
    BlockHeaderResponseData,
)
from frame_relayer.providers.http_provider import HTTPProvider, NotOkResponse, data_is_dict
from frame_relayer.types import BlockRoot, SlotNumber

logger = logging.getLogger(__name__)

LiteralState = Literal['head', 'genesis', 'finalized', 'justified']


class ConsensusClientError(NotOkResponse):
    pass


class ConsensusClient(HTTPProvider):
    """
    API specifications can be found here
    https://ethereum.github.io/beacon-APIs/

    state_id
    Block identifier. Can be one of: "head" (canonical head in node's view), "genesis", "finalized", <slot>, <hex encoded blockRoot with 0x prefix>.
    """

    PROVIDER_EXCEPTION = ConsensusClientError
    PROMETHEUS_HISTOGRAM = CL_REQUESTS_DURATION

    API_GET_BLOCK_HEADER = 'eth/v1/beacon/headers/{}'
    API_GET_SPEC = 'eth/v1/config/spec'

    def get_config_spec(self) -> BeaconSpecResponse:
        """Spec: https://ethereum.github.io/beacon-APIs/#/Config/getSpec"""
        data, _ = self._get(self.API_GET_SPEC, retval_validator=data_is_dict)
        return BeaconSpecResponse.from_response(**data)

    def get_block_header(self, state_id: SlotNumber | BlockRoot | LiteralState) -> BlockHeaderFullResponse:
        """
        Spec: https://ethereum.github.io/beacon-APIs/#/Beacon/getBlockHeader

        No cache: the relayer re-reads chain state every cycle.
        Raises NotOkResponse with 404 status if there is no block in requested slot.
        """
        data, meta_data = self._get(
            self.API_GET_BLOCK_HEADER,
            path_params=(state_id,),
            force_raise=self.__raise_last_missed_slot_error,
            retval_validator=data_is_dict,
        )
        return BlockHeaderFullResponse.from_response(data=BlockHeaderResponseData.from_response(**data), **meta_data)

    def get_finalized_slot(self) -> SlotNumber:
        header = self.get_block_header('finalized')
        return header.data.header.message.slot

    def __raise_last_missed_slot_error(self, errors: list[Exception]) -> Exception | None:
        """
        Prioritize NotOkResponse before other exceptions (ConnectionError, TimeoutError).
        If status is 404 slot is missed and this should be handled correctly.
        """
        if len(errors) == len(self.hosts):
            for error in errors:
                if isinstance(error, NotOkResponse) and error.status == HTTPStatus.NOT_FOUND:
                    return error

        return None

    def _get_chain_id_with_provider(self, provider_index: int) -> int:
        data, _ = self._get_without_fallbacks(
            self.hosts[provider_index],
            self.API_GET_SPEC,
            retval_validator=data_is_dict,
        )
        return BeaconSpecResponse.from_response(**data).DEPOSIT_CHAIN_ID
