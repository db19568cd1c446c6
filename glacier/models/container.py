"""
Pydantic models for containers managed by the node manager.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class ContainerSpec(BaseModel):
    """What to pass to ``docker run``."""
    name: str = Field(..., description="Container name, used as the lookup key")
    image: str = Field(..., description="Image reference including tag")
    env_names: List[str] = Field(
        default_factory=list,
        description="Environment variables forwarded by name from the launching process",
    )
    volumes: List[str] = Field(default_factory=list, description="host:container bind mounts")
    args: List[str] = Field(default_factory=list, description="Arguments after the image")
    detach: bool = Field(default=True, description="Run in the background")


class ContainerInfo(BaseModel):
    """One line of ``docker ps --format '{{json .}}'``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="ID")
    image: str = Field(default="", alias="Image")
    names: str = Field(default="", alias="Names")
    status: str = Field(default="", alias="Status")
    state: str = Field(default="", alias="State")
    created_at: str = Field(default="", alias="CreatedAt")

    @property
    def running(self) -> bool:
        if self.state:
            return self.state.lower() == "running"
        # Older engines omit State; Status reads "Up 3 hours"
        return self.status.startswith("Up")
