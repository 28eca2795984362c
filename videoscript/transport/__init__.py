"""Upload transports for VideoScript."""

from .base import AbstractUploadTransport, UploadHandle
from .simulated import SimulatedUploadTransport
from .http import HttpUploadTransport

__all__ = [
    "AbstractUploadTransport",
    "UploadHandle",
    "SimulatedUploadTransport",
    "HttpUploadTransport",
]
