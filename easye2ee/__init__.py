# easye2ee end-to-end encryption engine

from easye2ee.crypto.elgamal import ElGamal
from easye2ee.session import E2EESession
from easye2ee.worker.service import KeyGenService

__all__ = [
    "E2EESession",
    "ElGamal",
    "KeyGenService",
]
