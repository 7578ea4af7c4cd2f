from typing import List

from abstractions.selection_policy import SelectionPolicy
from contracts.endpoint import Endpoint, EndpointPair


class FixedPreferencePolicy(SelectionPolicy):
    """
    Always tries the same endpoint first, falling back to the other.
    """

    def __init__(self, prefer_primary: bool = True):
        self.prefer_primary = prefer_primary

    def preference_order(self, request_index: int, endpoints: EndpointPair) -> List[Endpoint]:
        if self.prefer_primary:
            return [endpoints.primary, endpoints.secondary]
        return [endpoints.secondary, endpoints.primary]
