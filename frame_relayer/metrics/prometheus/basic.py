from enum import Enum

from prometheus_client import Counter, Gauge, Histogram, Info
from prometheus_client.utils import INF

from frame_relayer.variables import PROMETHEUS_PREFIX


class Status(Enum):
    SUCCESS = 'success'
    FAILURE = 'failure'


BUILD_INFO = Info(
    'build',
    'Build info',
    namespace=PROMETHEUS_PREFIX,
)

ENV_VARIABLES_INFO = Info(
    'env_variables',
    'Env variables for the app',
    namespace=PROMETHEUS_PREFIX,
)

RELAYER_SLOT_NUMBER = Gauge(
    "slot_number",
    "Relayer finalized slot number",
    ["state"],  # "finalized"
    namespace=PROMETHEUS_PREFIX,
)

FRAME_SLOT = Gauge(
    "frame_slot",
    "Slots of the reporting frame",
    ["kind"],  # "ref", "deadline" or "next"
    namespace=PROMETHEUS_PREFIX,
)

CYCLE_SLEEP_SECONDS = Gauge(
    "cycle_sleep_seconds",
    "Seconds the relayer is going to sleep before the next cycle",
    namespace=PROMETHEUS_PREFIX,
)

GATE_DECISIONS = Counter(
    "gate_decisions",
    "Decisions made for the current frame",
    ["decision"],
    namespace=PROMETHEUS_PREFIX,
)

MISSED_SLOTS = Counter(
    "missed_slots",
    "Slots skipped while looking for the frame anchor header",
    ["reason"],  # "missed" or "unavailable"
    namespace=PROMETHEUS_PREFIX,
)

CYCLE_ERRORS = Counter(
    "cycle_errors",
    "Errors caught inside relayer cycle",
    ["error"],
    namespace=PROMETHEUS_PREFIX,
)

FUNCTIONS_DURATION = Histogram(
    'functions_duration',
    'Duration of relayer daemon tasks',
    ['name', 'status'],
    namespace=PROMETHEUS_PREFIX,
    buckets=(.1, .5, 1.0, 2.5, 5.0, 7.5, 10.0, 20.0, 30.0, 60.0, 120.0, 180.0, 240.0, 300.0, 600.0, INF),
)

requests_buckets = (.01, .05, .1, .25, .5, .75, 1.0, 2.5, 5.0, 7.5, 10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 120.0, INF)

CL_REQUESTS_DURATION = Histogram(
    'cl_requests_duration',
    'Duration of requests to CL API',
    ['endpoint', 'code', 'domain'],
    namespace=PROMETHEUS_PREFIX,
    buckets=requests_buckets,
)

TRANSACTIONS_COUNT = Counter(
    'transactions_count',
    'Total count of transactions. Success or failure',
    ['status'],
    namespace=PROMETHEUS_PREFIX,
)
