from enum import Enum

from pydantic import BaseModel


class BasePydanticModel(BaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }

class FrozenPydanticModel(BasePydanticModel):
    model_config = {**BasePydanticModel.model_config, "frozen": True}

class AgentState(str, Enum):
    CREATED = "created"
    STARTED = "started"
    STOPPED = "stopped"
