from abc import ABC, abstractmethod
from typing import List

from contracts.endpoint import Endpoint, EndpointPair


class SelectionPolicy(ABC):
    """
    Abstract base class for preference policies. A policy only decides the order
    in which candidates are tried; failover over that order is the balancer's job.
    """

    @abstractmethod
    def preference_order(self, request_index: int, endpoints: EndpointPair) -> List[Endpoint]:
        """
        Return every known endpoint, most preferred first, for one request.

        Args:
            request_index (int): 1-based index of the request within the run.
            endpoints (EndpointPair): The endpoints to order.

        Returns:
            List[Endpoint]: All endpoints, each exactly once.
        """
        pass
