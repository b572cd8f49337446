# Background key generation
from easye2ee.worker.protocol import KeyGenResult, handle_request
from easye2ee.worker.service import KeyGenJob, KeyGenService, KeyGenState

__all__ = [
    "KeyGenJob",
    "KeyGenResult",
    "KeyGenService",
    "KeyGenState",
    "handle_request",
]
