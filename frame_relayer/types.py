from typing import NewType

from eth_typing import HexStr


SlotNumber = NewType('SlotNumber', int)
StateRoot = NewType('StateRoot', HexStr)
BlockRoot = NewType('BlockRoot', HexStr)

ValidatorIndex = NewType('ValidatorIndex', int)
