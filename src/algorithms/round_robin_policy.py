import logging
from typing import List

from abstractions.selection_policy import SelectionPolicy
from config.logging_config import setup_logging
from contracts.endpoint import Endpoint, EndpointPair
from core.profiler import Profiler

setup_logging()
logger = logging.getLogger(__name__)


class AlternatingPreferencePolicy(SelectionPolicy):
    """
    Round-robin stand-in: odd requests prefer the primary, even requests the secondary.
    """

    @Profiler.profile
    def preference_order(self, request_index: int, endpoints: EndpointPair) -> List[Endpoint]:
        """
        Order the pair for one request.

        Args:
            request_index (int): 1-based request index.
            endpoints (EndpointPair): The endpoint pair.

        Returns:
            List[Endpoint]: [primary, secondary] for odd indices, [secondary, primary] for even ones.
        """
        if request_index % 2 == 1:
            order = [endpoints.primary, endpoints.secondary]
        else:
            order = [endpoints.secondary, endpoints.primary]
        logger.debug(
            f"Request {request_index}: preference order {[e.identifier for e in order]}"
        )
        return order
