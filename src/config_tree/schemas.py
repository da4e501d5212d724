from pydantic import BaseModel, Field


class CoordinationConfigValidator(BaseModel):
    """Validator for ZooKeeper connection parameters."""
    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    timeout: float = Field(gt=0)
    hosts_path: str = Field(pattern=r"^(/[^/]+)+$")
    app: str = Field(min_length=1, pattern=r"^[^/.]+$")
