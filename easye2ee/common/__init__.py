# Common utilities
from easye2ee.common.config import Config as Config
from easye2ee.common.crypto import CryptoUtils as CryptoUtils
from easye2ee.common.logging_utils import setup_logger as setup_logger

__all__ = ["Config", "CryptoUtils", "setup_logger"]
