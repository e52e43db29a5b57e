import json
import logging

logger = logging.getLogger(__name__)

BUILD_INFO_PATH = './build-info.json'
UNKNOWN_BUILD_INFO = {'version': 'unknown', 'branch': 'unknown', 'commit': 'unknown'}


def get_build_info(path: str = BUILD_INFO_PATH) -> dict:
    """build-info.json is written by the image build. Local runs have no such file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            build_info = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as error:
        logger.debug({'msg': 'Build info is not available.', 'error': str(error)})
        return dict(UNKNOWN_BUILD_INFO)

    return {**UNKNOWN_BUILD_INFO, **build_info}
