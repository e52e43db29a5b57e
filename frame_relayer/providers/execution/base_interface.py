import json
import logging
from typing import Any, Self, Type

from web3 import Web3
from web3.contract import Contract
from web3.types import BlockIdentifier

logger = logging.getLogger(__name__)


class ContractInterface(Contract):
    """
    Contract with ABI loaded from `abi_path`. Subclasses wrap raw contract calls into typed methods.
    ABI paths are relative to the repository root.
    """
    abi_path: str

    @staticmethod
    def load_abi(abi_file: str) -> list[dict]:
        with open(abi_file, encoding='utf-8') as abi_json:
            return json.load(abi_json)

    @classmethod
    def factory(cls, w3: Web3, class_name: str | None = None, **kwargs: Any) -> Type[Self]:
        if not getattr(cls, 'abi_path', None):
            raise AttributeError(f'{cls.__name__} has no abi_path')

        return super().factory(w3, class_name, abi=cls.load_abi(cls.abi_path), **kwargs)

    def is_deployed(self, block: BlockIdentifier = 'latest') -> bool:
        code = self.w3.eth.get_code(self.address, block_identifier=block)
        deployed = code != b''
        logger.info({
            'msg': f'Check {self.__class__.__name__} code.',
            'address': self.address,
            'block_identifier': repr(block),
            'value': deployed,
        })
        return deployed
