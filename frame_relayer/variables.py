import os
from typing import Final

from eth_account import Account

from frame_relayer.constants import UINT32_MAX
from frame_relayer.utils.env import from_file_or_env

# - Providers-
EXECUTION_CLIENT_URI: Final = os.getenv('EXECUTION_CLIENT_URI', '').split(',')
# Chain where the reporting protocol lives. Same as target chain if not set
SOURCE_EXECUTION_CLIENT_URI: Final = (os.getenv('SOURCE_EXECUTION_CLIENT_URI') or os.getenv('EXECUTION_CLIENT_URI', '')).split(',')
CONSENSUS_CLIENT_URI: Final = os.getenv('CONSENSUS_CLIENT_URI', '').split(',')

# - Account -
ACCOUNT = None
RELAYER_PRIV_KEY = from_file_or_env('RELAYER_PRIV_KEY')

if RELAYER_PRIV_KEY:
    ACCOUNT = Account.from_key(RELAYER_PRIV_KEY)  # False-positive. pylint: disable=no-value-for-parameter

# - App specific -
LIDO_LOCATOR_ADDRESS: Final = os.getenv('LIDO_LOCATOR_ADDRESS')
SUCCINCT_ORACLE_ADDRESS: Final = os.getenv('SUCCINCT_ORACLE_ADDRESS')

# Requests are only sent on-chain if explicitly enabled. Otherwise the relayer logs what it would send
SUBMIT_REQUESTS: Final = os.getenv('SUBMIT_REQUESTS', 'False').lower() == 'true'
# Gas limit the oracle uses for the fulfillment callback
REQUEST_GAS_BUDGET: Final = int(os.getenv('REQUEST_GAS_BUDGET', 500_000))
assert 0 < REQUEST_GAS_BUDGET <= UINT32_MAX, "REQUEST_GAS_BUDGET must fit into uint32"

# Extra attempts for a slot header request that failed with anything but 404
HEADER_FETCH_RETRY_COUNT: Final = int(os.getenv('HEADER_FETCH_RETRY_COUNT', 2))

# We add some gas to the transaction to be sure that we have enough gas to execute corner cases
TX_GAS_ADDITION: Final = int(os.getenv('TX_GAS_ADDITION', 100_000))

# Transactions fee calculation variables
MIN_PRIORITY_FEE: Final = int(os.getenv('MIN_PRIORITY_FEE', 10_000_000))
MAX_PRIORITY_FEE: Final = int(os.getenv('MAX_PRIORITY_FEE', 10_000_000_000))
PRIORITY_FEE_PERCENTILE: Final = int(os.getenv('PRIORITY_FEE_PERCENTILE', 3))

DAEMON: Final = os.getenv('DAEMON', 'True').lower() == 'true'
if DAEMON:
    # Fallback sleep if next frame slot could not be calculated
    CYCLE_SLEEP_IN_SECONDS = int(os.getenv('CYCLE_SLEEP_IN_SECONDS', 12))
else:
    # Remove all sleep in manual mode
    CYCLE_SLEEP_IN_SECONDS = 0

# HTTP variables
HTTP_REQUEST_TIMEOUT_EXECUTION: Final = int(os.getenv('HTTP_REQUEST_TIMEOUT_EXECUTION', 2 * 60))

HTTP_REQUEST_TIMEOUT_CONSENSUS: Final = int(os.getenv('HTTP_REQUEST_TIMEOUT_CONSENSUS', 5 * 60))
HTTP_REQUEST_RETRY_COUNT_CONSENSUS: Final = int(os.getenv('HTTP_REQUEST_RETRY_COUNT_CONSENSUS', 5))
HTTP_REQUEST_SLEEP_BEFORE_RETRY_IN_SECONDS_CONSENSUS: Final = int(
    os.getenv('HTTP_REQUEST_SLEEP_BEFORE_RETRY_IN_SECONDS_CONSENSUS', 5)
)

# - Metrics -
PROMETHEUS_PORT: Final = int(os.getenv('PROMETHEUS_PORT', 9000))
PROMETHEUS_PREFIX: Final = os.getenv("PROMETHEUS_PREFIX", "frame_relayer")

HEALTHCHECK_SERVER_PORT: Final = int(os.getenv('HEALTHCHECK_SERVER_PORT', 9010))

MAX_CYCLE_LIFETIME_IN_SECONDS: Final = int(os.getenv("MAX_CYCLE_LIFETIME_IN_SECONDS", 3000))


def check_all_required_variables():
    errors = check_uri_required_variables()
    if not LIDO_LOCATOR_ADDRESS:
        errors.append('LIDO_LOCATOR_ADDRESS')

    if not SUCCINCT_ORACLE_ADDRESS:
        errors.append('SUCCINCT_ORACLE_ADDRESS')

    return errors


def check_uri_required_variables():
    required_uris = {
        'EXECUTION_CLIENT_URI': EXECUTION_CLIENT_URI,
        'SOURCE_EXECUTION_CLIENT_URI': SOURCE_EXECUTION_CLIENT_URI,
        'CONSENSUS_CLIENT_URI': CONSENSUS_CLIENT_URI,
    }
    return [name for name, uri in required_uris.items() if '' in uri]


def raise_from_errors(errors):
    if errors:
        raise ValueError("The following variables are required: " + ", ".join(errors))


# All non-private env variables to the logs in main
PUBLIC_ENV_VARS = {
    key: str(value)
    for key, value in {
        'ACCOUNT': 'Dry' if ACCOUNT is None else ACCOUNT.address,
        'LIDO_LOCATOR_ADDRESS': LIDO_LOCATOR_ADDRESS,
        'SUCCINCT_ORACLE_ADDRESS': SUCCINCT_ORACLE_ADDRESS,
        'SUBMIT_REQUESTS': SUBMIT_REQUESTS,
        'REQUEST_GAS_BUDGET': REQUEST_GAS_BUDGET,
        'HEADER_FETCH_RETRY_COUNT': HEADER_FETCH_RETRY_COUNT,
        'TX_GAS_ADDITION': TX_GAS_ADDITION,
        'MIN_PRIORITY_FEE': MIN_PRIORITY_FEE,
        'MAX_PRIORITY_FEE': MAX_PRIORITY_FEE,
        'PRIORITY_FEE_PERCENTILE': PRIORITY_FEE_PERCENTILE,
        'DAEMON': DAEMON,
        'CYCLE_SLEEP_IN_SECONDS': CYCLE_SLEEP_IN_SECONDS,
        'HTTP_REQUEST_TIMEOUT_EXECUTION': HTTP_REQUEST_TIMEOUT_EXECUTION,
        'HTTP_REQUEST_TIMEOUT_CONSENSUS': HTTP_REQUEST_TIMEOUT_CONSENSUS,
        'HTTP_REQUEST_RETRY_COUNT_CONSENSUS': HTTP_REQUEST_RETRY_COUNT_CONSENSUS,
        'HTTP_REQUEST_SLEEP_BEFORE_RETRY_IN_SECONDS_CONSENSUS': HTTP_REQUEST_SLEEP_BEFORE_RETRY_IN_SECONDS_CONSENSUS,
        'PROMETHEUS_PORT': PROMETHEUS_PORT,
        'PROMETHEUS_PREFIX': PROMETHEUS_PREFIX,
        'HEALTHCHECK_SERVER_PORT': HEALTHCHECK_SERVER_PORT,
        'MAX_CYCLE_LIFETIME_IN_SECONDS': MAX_CYCLE_LIFETIME_IN_SECONDS,
    }.items()
}

PRIVATE_ENV_VARS = {
    'EXECUTION_CLIENT_URI': EXECUTION_CLIENT_URI,
    'SOURCE_EXECUTION_CLIENT_URI': SOURCE_EXECUTION_CLIENT_URI,
    'CONSENSUS_CLIENT_URI': CONSENSUS_CLIENT_URI,
    'RELAYER_PRIV_KEY': RELAYER_PRIV_KEY,
}

assert not set(PRIVATE_ENV_VARS.keys()).intersection(set(PUBLIC_ENV_VARS.keys()))
