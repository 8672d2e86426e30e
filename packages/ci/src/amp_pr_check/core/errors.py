from __future__ import annotations

import shlex
from typing import Sequence


class PrCheckError(RuntimeError):
    """Base error"""

    exit_code: int = 1


class ConfigError(PrCheckError):
    """Required configuration is missing or invalid"""


class CommandFailedError(PrCheckError):
    """
    An external process exited non-zero (or could not be started).
    `exit_code` mirrors the child's status so the CLI can propagate it.
    """

    def __init__(self, argv: Sequence[str], returncode: int) -> None:
        self.argv = list(argv)
        self.returncode = int(returncode)
        self.exit_code = self.returncode if self.returncode > 0 else 1
        super().__init__(
            f"Command failed with exit status {self.returncode}: {shlex.join(self.argv)}"
        )


class PreconditionError(PrCheckError):
    """
    The working tree is not in a state the job can run from
    (e.g. no common ancestor with the trunk branch).
    """


class CredentialError(PrCheckError):
    """Key decryption or service-account activation failed"""


class ArchiveError(PrCheckError):
    """Packing, extracting or verifying build output failed"""


class SauceConnectError(PrCheckError):
    """Fetching the Sauce Labs access key failed"""


class DeployBotError(PrCheckError):
    """URL rewriting or the deploy bot callback failed"""
