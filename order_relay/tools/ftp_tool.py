"""FTP delivery of generated order documents.

Each delivery opens its own connection, uploads one file and closes.
The call blocks until the server confirms the transfer, so the logged
outcome is the real one. Failed uploads are not retried.
"""

from __future__ import annotations

import ftplib
import io
import logging
import posixpath
from dataclasses import dataclass

from order_relay.config import Settings
from order_relay.errors import DeliveryError
from order_relay.orders.csv_export import CsvDocument

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Outcome of one upload."""

    filename: str
    remote_path: str
    success: bool
    error: str = ""


class FtpDelivery:
    """Uploads CSV documents to the configured FTP server."""

    def __init__(
        self,
        host: str,
        port: int = 21,
        user: str = "",
        password: str = "",
        remote_dir: str = "",
        timeout: float = 60.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.remote_dir = remote_dir
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> FtpDelivery:
        return cls(
            host=settings.ftp_host,
            port=settings.ftp_port,
            user=settings.ftp_user,
            password=settings.ftp_password,
            remote_dir=settings.ftp_remote_dir,
            timeout=settings.ftp_timeout,
        )

    def remote_path(self, filename: str) -> str:
        if not self.remote_dir:
            return filename
        return posixpath.join(self.remote_dir, filename)

    def _connect(self) -> ftplib.FTP:
        return ftplib.FTP(timeout=self.timeout)

    def upload(self, document: CsvDocument) -> str:
        """Upload ``document`` and return its remote path.

        Raises:
            DeliveryError: connection, login or transfer failed
        """
        if not self.host:
            raise DeliveryError("FTP host is not configured")

        path = self.remote_path(document.filename)
        try:
            with self._connect() as ftp:
                ftp.connect(self.host, self.port)
                ftp.login(self.user, self.password)
                ftp.storbinary(f"STOR {path}", io.BytesIO(document.encode()))
        except (ftplib.Error, OSError, EOFError) as e:
            raise DeliveryError(f"Upload of {path} to {self.host}:{self.port} failed: {e}") from e
        return path

    def deliver(self, document: CsvDocument) -> DeliveryResult:
        """Upload ``document`` and log the outcome once it is known."""
        path = self.remote_path(document.filename)
        try:
            path = self.upload(document)
        except DeliveryError as e:
            logger.error("FTP delivery of %s failed: %s", document.filename, e)
            return DeliveryResult(document.filename, path, success=False, error=str(e))

        logger.info("FTP upload of %s to %s:%s/%s successful", document.filename, self.host, self.port, path)
        return DeliveryResult(document.filename, path, success=True)
