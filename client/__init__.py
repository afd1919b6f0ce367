from client.api_client import DashboardClient, DashboardAPIError
from client.poller import StatusPoller, PollerGroup, start_polling

__all__ = [
    'DashboardClient', 'DashboardAPIError',
    'StatusPoller', 'PollerGroup', 'start_polling'
]
