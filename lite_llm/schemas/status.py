from datetime import datetime

from pydantic import BaseModel

from lite_llm.schemas.hardware import HardwareProfile
from lite_llm.schemas.metrics import UtilizationSample
from lite_llm.schemas.models import ModelRecord


class InferenceStatus(BaseModel):
    endpoint: str
    reachable: bool
    error: str | None = None
    models: list[ModelRecord] = []
    models_error: str | None = None


class WebInterfaceStatus(BaseModel):
    url: str
    reachable: bool


class StatusReport(BaseModel):
    timestamp: datetime
    hardware: HardwareProfile
    utilization: UtilizationSample
    inference: InferenceStatus
    web_interfaces: list[WebInterfaceStatus] = []
