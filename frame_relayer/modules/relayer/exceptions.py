class UpstreamUnavailable(Exception):
    """Reporting protocol contract could not be read"""


class NoHeaderFound(Exception):
    """All slots in the requested range are missed or unavailable"""


class IncompatibleException(Exception):
    pass
