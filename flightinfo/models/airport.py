"""
Airport-related Pydantic models for the flight information service.
"""

from pydantic import BaseModel, Field, ConfigDict


class AirportModel(BaseModel):
    """Airport reference information."""
    model_config = ConfigDict(from_attributes=True)

    airport_id: int
    code: str = Field(..., min_length=4, max_length=4, description="ICAO airport code")
    name: str = Field(..., max_length=100, description="Airport name")
