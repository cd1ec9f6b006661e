"""
OsmNode model representing an OpenStreetMap node before conversion to a POS.
"""

from pydantic import BaseModel, Field


class OsmNode(BaseModel):
    """
    An OpenStreetMap node with the information relevant for a POS.

    Attributes:
        node_id: OpenStreetMap node ID
    """

    # TODO: carry the name and addr:* tags once fetch_node talks to the OSM API
    node_id: int = Field(..., gt=0)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "node_id": 5589879349
            }
        }
