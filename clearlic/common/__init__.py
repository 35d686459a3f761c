# Common utilities
from clearlic.common.config import Config as Config
from clearlic.common.logging_utils import setup_logger as setup_logger

__all__ = ["Config", "setup_logger"]
