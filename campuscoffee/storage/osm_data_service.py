"""
OpenStreetMap import adapter.
"""

from campuscoffee.core.exceptions import OsmNodeNotFoundError
from campuscoffee.core.models import OsmNode
from campuscoffee.core.ports import OsmDataService
from campuscoffee.observability.logger import get_logger

logger = get_logger(__name__)

# The only node the stub knows about
KNOWN_NODE_ID = 5589879349


class StubOsmDataService(OsmDataService):
    """
    Stand-in for the OpenStreetMap API (https://www.openstreetmap.org/api/0.6/node/{id}).

    Returns a hardcoded node for ``KNOWN_NODE_ID`` and reports every other
    node as missing.
    """

    def fetch_node(self, node_id: int) -> OsmNode:
        logger.warning(
            f"Using stub OSM import service - returning hardcoded data for node {node_id}",
            extra={"node_id": node_id}
        )

        if node_id == KNOWN_NODE_ID:
            return OsmNode(node_id=node_id)

        raise OsmNodeNotFoundError(node_id)
