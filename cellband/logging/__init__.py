"""Communication logging for AT command traffic."""

from cellband.logging.log_models import LogEntry
from cellband.logging.file_handler import FileHandler
from cellband.logging.communication_logger import CommunicationLogger

__all__ = ['LogEntry', 'FileHandler', 'CommunicationLogger']
