import logging
import os
import signal
import threading
import traceback

from requests.exceptions import ConnectionError as RequestsConnectionError
from timeout_decorator import timeout, TimeoutError as DecoratorTimeoutError
from web3.exceptions import Web3Exception
from web3_multi_provider import NoActiveProviderError

from frame_relayer import variables
from frame_relayer.metrics.healthcheck_server import pulse
from frame_relayer.metrics.prometheus.basic import CYCLE_ERRORS, CYCLE_SLEEP_SECONDS, RELAYER_SLOT_NUMBER
from frame_relayer.modules.relayer.exceptions import NoHeaderFound, UpstreamUnavailable
from frame_relayer.modules.relayer.frame_clock import FrameClock
from frame_relayer.modules.relayer.header_resolver import HeaderResolver
from frame_relayer.modules.relayer.request_gate import RequestGate
from frame_relayer.modules.relayer.types import Action, RelayerConfig
from frame_relayer.providers.http_provider import NotOkResponse
from frame_relayer.types import SlotNumber
from frame_relayer.web3py.types import Web3

logger = logging.getLogger(__name__)

FORCE_EXIT_CODE = 130


class CancellationToken:
    """Stop flag shared between the signal handler and the scheduler. Set at most once."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    def wait(self, seconds: float) -> bool:
        """Sleep for `seconds` or until cancelled. Returns True if cancelled."""
        return self._event.wait(seconds)


def install_shutdown_handler(token: CancellationToken):
    """
    First SIGINT finishes current cycle and stops the relayer.
    Second SIGINT kills the process immediately.
    """
    def handler(signum, frame):
        if token.stopped:
            logger.warning({'msg': 'Force stopping..'})
            os._exit(FORCE_EXIT_CODE)  # pylint: disable=protected-access

        logger.info({'msg': 'Stopping.. (Ctrl-C again to force)'})
        token.cancel()

    signal.signal(signal.SIGINT, handler)
    return handler


def compute_sleep_seconds(next_frame_slot: SlotNumber, finalized_slot: SlotNumber, seconds_per_slot: int) -> int:
    return max(0, (next_frame_slot - finalized_slot) * seconds_per_slot)


class Scheduler:
    """
    Relayer main loop.

    Goals:
    - Request a report once per frame.
    - Catch errors and log them. One failed cycle never stops the next ones.
    - Sleep until the next frame is expected to open.
    """

    def __init__(self, w3: Web3, config: RelayerConfig, token: CancellationToken):
        self.w3 = w3
        self.config = config
        self.token = token
        self.frame_clock = FrameClock(config.hash_consensus, config.frame_length_slots)
        self.request_gate = RequestGate(w3, config, HeaderResolver(w3.cc))

    def run_as_daemon(self):
        logger.info({'msg': 'Run relayer as daemon.'})
        while not self.token.stopped:
            logger.debug({'msg': 'Startup new cycle.'})
            self.cycle_handler()
        logger.info({'msg': 'Relayer stopped.'})

    def run_once(self) -> Action | None:
        logger.info({'msg': 'Run relayer cycle once.'})
        return self._cycle()

    def cycle_handler(self):
        self._cycle()
        self._sleep_cycle()

    def _cycle(self) -> Action | None:
        try:
            return self._guarded_cycle()
        except DecoratorTimeoutError as error:
            logger.error({'msg': 'Relayer cycle does not respond.', 'error': str(error)})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        return None

    @timeout(variables.MAX_CYCLE_LIFETIME_IN_SECONDS)
    def _guarded_cycle(self) -> Action | None:
        try:
            return self.execute_cycle()
        except UpstreamUnavailable as error:
            logger.error({'msg': 'Reporting protocol contract is unavailable.', 'error': str(error)})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        except NoHeaderFound as error:
            logger.error({'msg': 'Inconsistent response from consensus layer node.', 'error': str(error)})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        except NoActiveProviderError as error:
            logger.error({'msg': ''.join(traceback.format_exception(error))})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        except RequestsConnectionError as error:
            logger.error({'msg': 'Connection error.', 'error': str(error)})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        except NotOkResponse as error:
            logger.error({'msg': ''.join(traceback.format_exception(error))})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        except Web3Exception as error:
            logger.error({'msg': 'Web3py exception.', 'error': str(error)})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        except DecoratorTimeoutError:
            raise
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.error({'msg': 'Unexpected error.', 'error': ''.join(traceback.format_exception(error))})
            CYCLE_ERRORS.labels(type(error).__name__).inc()
        return None

    def execute_cycle(self) -> Action:
        finalized_slot = self._receive_last_finalized_slot()
        frame = self.frame_clock.get_current_frame()
        logger.info({'msg': 'Execute relayer cycle.', 'value': frame, 'finalized_slot': finalized_slot})
        action = self.request_gate.process_frame(frame, finalized_slot)
        pulse()
        return action

    def _sleep_cycle(self):
        seconds = self._get_sleep_seconds()
        CYCLE_SLEEP_SECONDS.set(seconds)
        logger.info({'msg': f'Cycle end. Sleeping for {seconds} seconds.'})
        self._sleep(seconds)

    def _get_sleep_seconds(self) -> int:
        try:
            frame = self.frame_clock.get_current_frame()
            next_frame_slot = self.frame_clock.next_frame_slot(frame.ref_slot)
            finalized_slot = self._receive_last_finalized_slot()
        except (UpstreamUnavailable, NotOkResponse, RequestsConnectionError, NoActiveProviderError, ValueError) as error:
            logger.error({
                'msg': f'Failed to calculate next frame slot. Sleep for {variables.CYCLE_SLEEP_IN_SECONDS} seconds.',
                'error': str(error),
            })
            CYCLE_ERRORS.labels(type(error).__name__).inc()
            return variables.CYCLE_SLEEP_IN_SECONDS
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.error({
                'msg': f'Unexpected error on next frame slot calculation. Sleep for {variables.CYCLE_SLEEP_IN_SECONDS} seconds.',
                'error': ''.join(traceback.format_exception(error)),
            })
            CYCLE_ERRORS.labels(type(error).__name__).inc()
            return variables.CYCLE_SLEEP_IN_SECONDS

        logger.info({'msg': f'Next frame slot: {next_frame_slot} / Current slot: {finalized_slot}'})
        return compute_sleep_seconds(next_frame_slot, finalized_slot, self.config.seconds_per_slot)

    def _sleep(self, seconds: int):
        """Sleep in chunks to keep healthcheck alive. Wakes up as soon as the relayer is stopped."""
        chunk = max(1, variables.MAX_CYCLE_LIFETIME_IN_SECONDS // 2)
        remaining = seconds

        while remaining > 0:
            if self.token.wait(min(chunk, remaining)):
                logger.info({'msg': 'Sleep interrupted.'})
                return
            remaining -= chunk
            self._pulse()

    @staticmethod
    def _pulse():
        try:
            pulse()
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.error({'msg': 'Failed to send pulse.', 'error': str(error)})
            CYCLE_ERRORS.labels(type(error).__name__).inc()

    def _receive_last_finalized_slot(self) -> SlotNumber:
        slot = self.w3.cc.get_finalized_slot()
        logger.info({'msg': 'Fetch last finalized slot.', 'value': slot})
        RELAYER_SLOT_NUMBER.labels('finalized').set(slot)
        return slot
