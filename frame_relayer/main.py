from typing import cast

from prometheus_client import start_http_server
from web3_multi_provider.metrics import init_metrics

from frame_relayer import variables
from frame_relayer.metrics.healthcheck_server import start_pulse_server
from frame_relayer.metrics.logging import logging
from frame_relayer.metrics.prometheus.basic import BUILD_INFO, ENV_VARIABLES_INFO
from frame_relayer.modules.relayer.bootstrap import build_relayer_config
from frame_relayer.modules.relayer.exceptions import IncompatibleException
from frame_relayer.modules.relayer.scheduler import CancellationToken, Scheduler, install_shutdown_handler
from frame_relayer.utils.build import get_build_info
from frame_relayer.web3py.extensions import (
    ConsensusClientModule,
    FallbackProviderModule,
    RelayerContracts,
    TransactionUtils,
)
from frame_relayer.web3py.types import Web3

logger = logging.getLogger(__name__)


def main():
    build_info = get_build_info()
    logger.info({
        'msg': 'Relayer startup.',
        'variables': {
            **build_info,
            **variables.PUBLIC_ENV_VARS,
        },
    })
    ENV_VARIABLES_INFO.info(variables.PUBLIC_ENV_VARS)
    BUILD_INFO.info(build_info)

    logger.info({'msg': f'Start healthcheck server for Docker container on port {variables.HEALTHCHECK_SERVER_PORT}'})
    start_pulse_server()

    logger.info({'msg': f'Start http server with prometheus metrics on port {variables.PROMETHEUS_PORT}'})
    start_http_server(variables.PROMETHEUS_PORT)

    logger.info({'msg': 'Initialize multi web3 providers.'})
    web3 = Web3(FallbackProviderModule(
        variables.EXECUTION_CLIENT_URI,
        request_kwargs={'timeout': variables.HTTP_REQUEST_TIMEOUT_EXECUTION},
    ))
    source_web3 = Web3(FallbackProviderModule(
        variables.SOURCE_EXECUTION_CLIENT_URI,
        request_kwargs={'timeout': variables.HTTP_REQUEST_TIMEOUT_EXECUTION},
    ))

    logger.info({'msg': 'Initialize consensus client.'})
    cc = ConsensusClientModule(variables.CONSENSUS_CLIENT_URI, source_web3)

    logger.info({'msg': 'Check configured providers.'})
    check_providers_chain_ids(web3, source_web3, cc)

    # Contracts module reads source connection on init
    web3.attach_modules({'source': lambda: source_web3})  # type: ignore[dict-item]
    web3.attach_modules({
        'relayer_contracts': RelayerContracts,
        'transaction': TransactionUtils,
        'cc': lambda: cc,  # type: ignore[dict-item]
    })

    logger.info({'msg': 'Initialize prometheus metrics.'})
    init_metrics()

    config = build_relayer_config(web3)

    token = CancellationToken()
    install_shutdown_handler(token)

    scheduler = Scheduler(web3, config, token)

    if variables.DAEMON:
        scheduler.run_as_daemon()
    else:
        scheduler.run_once()


def check_providers_chain_ids(web3: Web3, source_web3: Web3, cc: ConsensusClientModule):
    """
    Consensus layer belongs to the source chain. Target chain is only checked for inner consistency.
    """
    consensus_chain_id = cc.check_providers_consistency()
    source_chain_id = cast(FallbackProviderModule, source_web3.provider).check_providers_consistency()
    target_chain_id = cast(FallbackProviderModule, web3.provider).check_providers_consistency()

    logger.info({
        'msg': 'Providers chain ids.',
        'consensus_chain_id': consensus_chain_id,
        'source_chain_id': source_chain_id,
        'target_chain_id': target_chain_id,
    })

    if consensus_chain_id == source_chain_id:
        return

    raise IncompatibleException(
        'Different chain ids detected:\n'
        f'Source execution chain id: {source_chain_id}\n'
        f'Consensus chain id: {consensus_chain_id}\n'
    )


if __name__ == '__main__':
    errors = variables.check_all_required_variables()
    variables.raise_from_errors(errors)
    main()
