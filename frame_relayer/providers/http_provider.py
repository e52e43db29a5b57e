import logging
from abc import ABC
from http import HTTPStatus
from typing import Any, Callable, NoReturn, Protocol, Sequence
from urllib.parse import urljoin, urlparse

from prometheus_client import Histogram
from requests import JSONDecodeError, Response, Session
from requests.adapters import HTTPAdapter
from urllib3 import Retry

from frame_relayer.providers.consistency import ProviderConsistencyModule

logger = logging.getLogger(__name__)


class NoHostsProvided(Exception):
    pass


class NotOkResponse(Exception):
    status: int
    text: str

    def __init__(self, *args, status: int, text: str):
        self.status = status
        self.text = text
        super().__init__(*args)


class ReturnValueValidator(Protocol):
    def __call__(self, data: Any, meta: dict, *, endpoint: str) -> None | NoReturn: ...


def data_is_any(data: Any, meta: dict, *, endpoint: str):
    pass


def data_is_dict(data: Any, meta: dict, *, endpoint: str):
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping response from {endpoint}")


class HTTPProvider(ProviderConsistencyModule, ABC):
    """
    Base HTTP provider with request duration metrics and urllib3 retries.
    Hosts are used in order, next host is requested only if previous one failed.
    """

    PROMETHEUS_HISTOGRAM: Histogram
    request_timeout: int

    PROVIDER_EXCEPTION = NotOkResponse
    # Statuses retried by the HTTP adapter itself, before falling back to the next host
    RETRY_STATUSES = (418, 429, 500, 502, 503, 504)

    def __init__(
        self,
        hosts: list[str],
        request_timeout: int,
        retry_total: int,
        retry_backoff_factor: int,
    ):
        if not hosts:
            raise NoHostsProvided(f"No hosts provided for {self.__class__.__name__}")

        self.hosts = hosts
        self.request_timeout = request_timeout
        self.session = self._build_session(retry_total, retry_backoff_factor)

    @classmethod
    def _build_session(cls, retry_total: int, retry_backoff_factor: int) -> Session:
        adapter = HTTPAdapter(max_retries=Retry(
            total=retry_total,
            status_forcelist=cls.RETRY_STATUSES,
            backoff_factor=retry_backoff_factor,
        ))

        session = Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    @staticmethod
    def _urljoin(host, url):
        if not host.endswith('/'):
            host += '/'
        return urljoin(host, url.lstrip('/'))

    def _get(
        self,
        endpoint: str,
        path_params: Sequence[str | int] | None = None,
        query_params: dict | None = None,
        force_raise: Callable[..., Exception | None] = lambda _: None,
        retval_validator: ReturnValueValidator = data_is_any,
    ) -> tuple[Any, dict]:
        """
        Get request with fallbacks
        Returns (data, meta) or raises exception

        force_raise - function that returns an Exception if it should be thrown immediately.
        Sometimes NotOk response from first provider is the response that we are expecting.
        """
        errors: list[Exception] = []

        for host in self.hosts:
            try:
                return self._get_without_fallbacks(
                    host,
                    endpoint,
                    path_params,
                    query_params,
                    retval_validator=retval_validator,
                )
            except Exception as e:  # pylint: disable=W0703
                errors.append(e)

                # Check if exception should be raised immediately
                if to_force_raise := force_raise(errors):
                    raise to_force_raise from e

                logger.warning(
                    {
                        'msg': f'[{self.__class__.__name__}] Host [{urlparse(host).netloc}] responded with error',
                        'error': str(e),
                        'provider': urlparse(host).netloc,
                    }
                )

        # Raise error from last provider.
        raise errors[-1]

    def _get_without_fallbacks(
        self,
        host: str,
        endpoint: str,
        path_params: Sequence[str | int] | None = None,
        query_params: dict | None = None,
        retval_validator: ReturnValueValidator = data_is_any,
    ) -> tuple[Any, dict]:
        """
        Single host get request
        Returns (data, meta) or raises PROVIDER_EXCEPTION
        """
        complete_endpoint = endpoint.format(*path_params) if path_params else endpoint
        response = self._send(host, endpoint, complete_endpoint, query_params)

        if response.status_code != HTTPStatus.OK:
            response_fail_msg = (
                f'Response from {complete_endpoint} [{response.status_code}] with text: "{response.text}" returned.'
            )
            logger.debug({'msg': response_fail_msg})
            raise self.PROVIDER_EXCEPTION(response_fail_msg, status=response.status_code, text=response.text)

        data, meta = self._split_data(response, complete_endpoint)
        retval_validator(data, meta, endpoint=endpoint)
        return data, meta

    def _send(self, host: str, endpoint: str, complete_endpoint: str, query_params: dict | None) -> Response:
        domain = urlparse(host).netloc

        with self.PROMETHEUS_HISTOGRAM.time() as t:
            try:
                response = self.session.get(
                    self._urljoin(host, complete_endpoint),
                    params=query_params,
                    timeout=self.request_timeout,
                )
            except Exception as error:
                logger.error({'msg': str(error)})
                t.labels(endpoint=endpoint, code=0, domain=domain)
                raise self.PROVIDER_EXCEPTION(status=0, text='Response error.') from error

            t.labels(endpoint=endpoint, code=response.status_code, domain=domain)

        return response

    def _split_data(self, response: Response, complete_endpoint: str) -> tuple[Any, dict]:
        """Beacon API wraps payload into "data", everything else is meta"""
        try:
            json_response = response.json()
        except JSONDecodeError as error:
            logger.debug({'msg': f'Failed to decode JSON response from {complete_endpoint} with text: "{response.text}"'})
            raise self.PROVIDER_EXCEPTION(status=0, text='JSON decode error.') from error

        if not isinstance(json_response, dict) or 'data' not in json_response:
            raise self.PROVIDER_EXCEPTION(status=0, text='No data field in response.')

        data = json_response.pop('data')
        return data, json_response

    def get_all_providers(self) -> list[str]:
        return self.hosts

    def _get_chain_id_with_provider(self, provider_index: int) -> int:
        raise NotImplementedError("_chain_id should be implemented")
