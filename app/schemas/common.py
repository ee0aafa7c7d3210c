from pydantic import BaseModel


class ServiceInfo(BaseModel):
    message: str
    version: str
    timestamp: str
    environment: str


class HealthStatus(BaseModel):
    status: str
    uptime: float
    timestamp: str


class ErrorResponse(BaseModel): # A generic error body
    error: str


class NotFoundResponse(ErrorResponse):
    path: str


class ServerErrorResponse(ErrorResponse):
    message: str
