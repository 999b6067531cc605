"""
Source retrieval for the damage dashboard.

The damage log workbook and its companion files live together on the back
office FTP share (or, for offline use, in a local directory). This module
fetches them, decodes the sheets into row dicts and records a status per
file. Only the primary workbook is mandatory; every companion file degrades
to an empty dataset when it is missing or unreadable.
"""

from dotenv import load_dotenv
load_dotenv()

import ftplib
import io
import json
import logging
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from openpyxl.utils.exceptions import InvalidFileException

import config
from external_tables import find_sheet, read_sheet, read_workbook, sheet_to_rows

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Base class for errors that abort a refresh."""

    def __init__(self, message: str = "", file_statuses: Optional[Dict[str, "FileStatus"]] = None):
        super().__init__(message)
        self.file_statuses = file_statuses or {}


class ConfigurationError(SourceError):
    """Raised when the FTP connection settings are incomplete."""
    pass


class FetchError(SourceError):
    """Raised when the primary workbook cannot be retrieved."""
    pass


class MissingSheetError(SourceError):
    """Raised when the primary workbook has no BRON sheet."""
    pass


class FetchStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"
    NOT_FOUND = "not_found"


@dataclass
class FileStatus:
    status: FetchStatus
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"status": self.status.value}
        if self.message:
            result["message"] = self.message
        return result


class FileFetcher:
    """
    Retrieves files by name.

    Subclasses implement ``fetch`` and raise FileNotFoundError for files that
    do not exist. A fetcher is used as a context manager for the duration of
    one refresh so connection-based fetchers can reuse a session.
    """

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def fetch(self, name: str) -> bytes:
        raise NotImplementedError


class LocalFetcher(FileFetcher):
    """Reads files from a directory on disk."""

    def __init__(self, root: str):
        self.root = Path(root)

    def fetch(self, name: str) -> bytes:
        path = self.root / name
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_bytes()


class FtpFetcher(FileFetcher):
    """Downloads files from the FTP share configured in the environment."""

    def __init__(
        self,
        host: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[int] = None,
        secure: Optional[bool] = None,
    ):
        self.host = host or config.FTP_HOST
        self.user = user or config.FTP_USER
        self.password = password or config.FTP_PASSWORD
        self.timeout = timeout or config.FTP_TIMEOUT
        self.secure = config.FTP_SECURE if secure is None else secure
        self._ftp = None

        missing = [
            name for name, value in
            (("FTP_HOST", self.host), ("FTP_USER", self.user), ("FTP_PASSWORD", self.password))
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing FTP configuration: {', '.join(missing)}")

    def __enter__(self):
        logger.info(f"[FTP] Connecting to {self.host} as {self.user}")
        ftp_class = ftplib.FTP_TLS if self.secure else ftplib.FTP
        try:
            self._ftp = ftp_class(self.host, timeout=self.timeout)
            self._ftp.login(self.user, self.password)
            if self.secure:
                self._ftp.prot_p()
        except (ftplib.Error, OSError) as e:
            raise FetchError(f"FTP connection to {self.host} failed: {e}") from e
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._ftp is not None:
            try:
                self._ftp.quit()
            except (ftplib.Error, OSError):
                self._ftp.close()
            self._ftp = None
        return False

    def fetch(self, name: str) -> bytes:
        if self._ftp is None:
            raise FetchError("FTP session is not open")

        buffer = io.BytesIO()
        try:
            self._ftp.retrbinary(f"RETR {name}", buffer.write)
        except ftplib.error_perm as e:
            if str(e).startswith("550"):
                raise FileNotFoundError(f"{name}: {e}") from e
            raise FetchError(f"Download of {name} failed: {e}") from e
        except (ftplib.Error, OSError) as e:
            raise FetchError(f"Download of {name} failed: {e}") from e
        return buffer.getvalue()


@dataclass
class RawSnapshot:
    """Everything fetched during one refresh, before normalization."""
    damage_rows: List[Dict[str, Any]] = field(default_factory=list)
    seniority_rows: List[Dict[str, Any]] = field(default_factory=list)
    personnel: Any = None
    coaching_requested: List[Dict[str, Any]] = field(default_factory=list)
    coaching_completed: List[Dict[str, Any]] = field(default_factory=list)
    conversations: List[Dict[str, Any]] = field(default_factory=list)
    allowed_users: List[Dict[str, Any]] = field(default_factory=list)
    file_statuses: Dict[str, FileStatus] = field(default_factory=dict)


def _directory_of(path: str) -> str:
    return path[: path.rfind("/") + 1] if "/" in path else ""


def _load_primary(fetcher: FileFetcher, path: str, snapshot: RawSnapshot) -> None:
    try:
        data = fetcher.fetch(path)
    except FileNotFoundError as e:
        snapshot.file_statuses[path] = FileStatus(FetchStatus.ERROR, str(e))
        raise FetchError(f"Damage log '{path}' not found") from e
    except FetchError as e:
        snapshot.file_statuses[path] = FileStatus(FetchStatus.ERROR, str(e))
        raise

    try:
        workbook = read_workbook(data)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError) as e:
        snapshot.file_statuses[path] = FileStatus(FetchStatus.ERROR, str(e))
        raise FetchError(f"Damage log '{path}' is not a readable workbook: {e}") from e

    try:
        if config.PRIMARY_SHEET not in workbook.sheetnames:
            message = f'Tabblad "{config.PRIMARY_SHEET}" niet gevonden'
            snapshot.file_statuses[path] = FileStatus(FetchStatus.ERROR, message)
            logger.error(f"[Sources] {message} in {path}")
            raise MissingSheetError(message)

        snapshot.damage_rows = sheet_to_rows(workbook[config.PRIMARY_SHEET])

        seniority_sheet = find_sheet(workbook, config.SENIORITY_SHEET_NAMES)
        if seniority_sheet:
            snapshot.seniority_rows = sheet_to_rows(workbook[seniority_sheet])
        else:
            logger.warning(f"[Sources] No seniority sheet in {path}")
            snapshot.file_statuses[f"{path} [{config.SENIORITY_SHEET_NAMES[0]}]"] = FileStatus(
                FetchStatus.NOT_FOUND, "Tabblad niet gevonden"
            )
    finally:
        workbook.close()

    snapshot.file_statuses[path] = FileStatus(FetchStatus.SUCCESS)


def _load_auxiliary(fetcher: FileFetcher, names: List[str], label: str, parse, snapshot: RawSnapshot) -> None:
    """
    Fetch one companion file and hand its bytes to ``parse``.

    ``names`` lists alternative spellings of the file, tried in order.
    Failures are recorded as a status under ``label`` and never raised.
    """
    last_error: Optional[Exception] = None
    for name in names:
        try:
            data = fetcher.fetch(name)
        except FileNotFoundError as e:
            last_error = e
            continue
        except (FetchError, OSError) as e:
            logger.warning(f"[Sources] {label}: {e}")
            snapshot.file_statuses[label] = FileStatus(FetchStatus.ERROR, str(e))
            return

        try:
            parse(data)
        except Exception as e:
            logger.warning(f"[Sources] {label} could not be read: {e}")
            snapshot.file_statuses[label] = FileStatus(FetchStatus.ERROR, str(e))
            return

        snapshot.file_statuses[label] = FileStatus(FetchStatus.SUCCESS)
        return

    logger.warning(f"[Sources] {label} not found")
    snapshot.file_statuses[label] = FileStatus(FetchStatus.NOT_FOUND, str(last_error) if last_error else None)


def load_snapshot(fetcher: FileFetcher, main_path: Optional[str] = None) -> RawSnapshot:
    """
    Fetch and decode the damage log and its companion files.

    Args:
        fetcher: Where to read files from
        main_path: Path of the damage log workbook (default: FTP_PATH)

    Returns:
        RawSnapshot with row dicts per dataset and a status per file

    Raises:
        FetchError: The damage log workbook could not be retrieved
        MissingSheetError: The damage log has no BRON sheet
    """
    main_path = main_path or config.FTP_PATH
    directory = _directory_of(main_path)
    snapshot = RawSnapshot()

    with fetcher:
        try:
            _load_primary(fetcher, main_path, snapshot)
        except SourceError as e:
            e.file_statuses = dict(snapshot.file_statuses)
            raise

        def parse_personnel(data):
            snapshot.personnel = json.loads(data.decode("utf-8-sig"))

        def parse_coaching(data):
            workbook = read_workbook(data)
            try:
                if config.COACHING_REQUESTED_SHEET in workbook.sheetnames:
                    snapshot.coaching_requested = sheet_to_rows(workbook[config.COACHING_REQUESTED_SHEET])
                if config.COACHING_COMPLETED_SHEET in workbook.sheetnames:
                    snapshot.coaching_completed = sheet_to_rows(workbook[config.COACHING_COMPLETED_SHEET])
            finally:
                workbook.close()

        def parse_users(data):
            snapshot.allowed_users = read_sheet(data) or []

        def parse_conversations(data):
            snapshot.conversations = read_sheet(data) or []

        _load_auxiliary(fetcher, [directory + config.PERSONNEL_FILE],
                        config.PERSONNEL_FILE, parse_personnel, snapshot)
        _load_auxiliary(fetcher, [directory + config.COACHING_FILE],
                        config.COACHING_FILE, parse_coaching, snapshot)
        _load_auxiliary(fetcher, [directory + config.AUTH_FILE],
                        config.AUTH_FILE, parse_users, snapshot)
        _load_auxiliary(fetcher,
                        [directory + config.CONVERSATIONS_FILE, directory + config.CONVERSATIONS_FILE_ALT],
                        config.CONVERSATIONS_FILE, parse_conversations, snapshot)

    logger.info(
        f"[Sources] Loaded {len(snapshot.damage_rows)} damage rows, "
        f"{len(snapshot.seniority_rows)} seniority rows"
    )
    return snapshot


def default_fetcher() -> FileFetcher:
    """LocalFetcher when LOCAL_DATA_DIR is set, otherwise the FTP share."""
    if config.LOCAL_DATA_DIR:
        return LocalFetcher(config.LOCAL_DATA_DIR)
    return FtpFetcher()
