"""Network generation oracle.

Answers the one question the band extractor needs before it can pick a
diagnostic query: is the serving cell on the newer (NR) or older (LTE)
radio generation. The concrete oracle asks oFono's NetworkMonitor over
the system D-Bus.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List
import logging
import subprocess

from cellband.core.exceptions import NetworkOracleError

logger = logging.getLogger(__name__)


class NetworkGeneration(Enum):
    """Coarse serving-cell radio generation."""
    NR = "nr"
    LTE = "lte"


class NetworkGenerationOracle(ABC):
    """Interface for anything that can classify the serving cell.

    Implementations raise (any exception) when they cannot answer; callers
    treat a failure as NetworkGeneration.LTE.
    """

    @abstractmethod
    def query_network_generation(self) -> NetworkGeneration:
        """Return the generation of the current serving cell."""
        pass


class DbusNetworkOracle(NetworkGenerationOracle):
    """Classify the serving cell via oFono's GetServingCellInformation.

    The reply is printed by ``dbus-send --print-reply``; a serving cell on
    NR carries the technology string ``"nr"`` in it.

    Example:
        >>> oracle = DbusNetworkOracle()
        >>> oracle.query_network_generation()
        <NetworkGeneration.LTE: 'lte'>
    """

    NR_MARKER = '"nr"'

    def __init__(self,
                 destination: str = "org.ofono",
                 object_path: str = "/ril_0",
                 timeout: float = 5.0):
        """Initialize oracle.

        Args:
            destination: D-Bus service name of the telephony stack
            object_path: Modem object path
            timeout: Seconds to wait for dbus-send
        """
        self.destination = destination
        self.object_path = object_path
        self.timeout = timeout

    def build_command(self) -> List[str]:
        return [
            "dbus-send",
            "--system",
            f"--dest={self.destination}",
            "--print-reply",
            self.object_path,
            "org.ofono.NetworkMonitor.GetServingCellInformation",
        ]

    def query_network_generation(self) -> NetworkGeneration:
        """Run dbus-send and classify its reply.

        Raises:
            NetworkOracleError: dbus-send missing, timed out or exited non-zero
        """
        command = self.build_command()
        command_line = " ".join(command)

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False
            )
        except FileNotFoundError as e:
            raise NetworkOracleError(f"dbus-send not available: {e}", command_line)
        except subprocess.TimeoutExpired:
            raise NetworkOracleError(
                f"No reply from {self.destination} within {self.timeout}s",
                command_line
            )

        if result.returncode != 0:
            raise NetworkOracleError(
                "Serving cell query failed",
                command_line,
                returncode=result.returncode,
                output=(result.stderr or result.stdout or "").strip()
            )

        generation = self.classify_reply(result.stdout or "")
        logger.debug(f"Serving cell generation from D-Bus: {generation.value}")
        return generation

    @classmethod
    def classify_reply(cls, reply: str) -> NetworkGeneration:
        """Map a GetServingCellInformation reply to a generation."""
        if cls.NR_MARKER in reply:
            return NetworkGeneration.NR
        return NetworkGeneration.LTE

    def __repr__(self) -> str:
        return f"DbusNetworkOracle(destination='{self.destination}', path='{self.object_path}')"
