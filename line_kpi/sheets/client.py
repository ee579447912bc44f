import logging
import threading

from google.auth.exceptions import RefreshError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from line_kpi.config import AppConfig, load_config
from line_kpi.errors import AuthError, NotFoundError, UpstreamError

from .credentials import load_service_account
from .models import Grid, ServiceAccountInfo


logger = logging.getLogger(__name__)


class GoogleSheetsClient:
    """Read-only access to a single spreadsheet"""

    SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

    def __init__(
        self,
        spreadsheet_id: str,
        service_account_info: ServiceAccountInfo,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.service = self._build_sheets_service(service_account_info)

    def _build_sheets_service(self, service_account_info: ServiceAccountInfo):
        """Create and return an authorized Sheets API service object"""
        try:
            creds = service_account.Credentials.from_service_account_info(
                service_account_info.as_info(), scopes=self.SCOPES
            )
            return build("sheets", "v4", credentials=creds, cache_discovery=False)
        except Exception as e:
            logger.error(f"Failed to build sheets service: {e}")
            raise AuthError(f"Could not initialize sheets service: {e}") from e

    def read_range(self, range_a1: str, value_render_option: str = "FORMATTED_VALUE") -> Grid:
        """Return the cell values of an A1 range as rows"""
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .get(
                    spreadsheetId=self.spreadsheet_id,
                    range=range_a1,
                    majorDimension="ROWS",
                    valueRenderOption=value_render_option,
                )
                .execute()
            )
        except RefreshError as e:
            logger.error(f"Service account rejected while reading {range_a1}: {e}")
            raise AuthError(f"Service account authentication failed: {e}") from e
        except HttpError as e:
            logger.error(f"Error reading range {range_a1}: {e}")
            if _is_missing_range(e):
                raise NotFoundError(f"Range not found: {range_a1}", code="RANGE_NOT_FOUND") from e
            raise UpstreamError(f"Failed to read range {range_a1}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading range {range_a1}: {e}")
            raise UpstreamError(f"Failed to read range {range_a1}: {e}") from e

        return result.get("values", [])


def _is_missing_range(error: HttpError) -> bool:
    status = getattr(error.resp, "status", None)
    if status == 404:
        return True
    return status == 400 and "Unable to parse range" in str(error)


_client: GoogleSheetsClient | None = None
_client_lock = threading.Lock()


def get_sheets_client(config: AppConfig | None = None) -> GoogleSheetsClient:
    """Return the process-wide client, authenticating on first use.

    The client is never refreshed; changed credentials need a restart.
    """
    global _client
    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            config = config or load_config()
            spreadsheet_id = config["SPREADSHEET_ID"]
            if not spreadsheet_id:
                raise AuthError("Missing env GOOGLE_SHEET_ID (or SPREADSHEET_ID)", code="MISSING_SHEET_ID")

            _client = GoogleSheetsClient(
                spreadsheet_id=spreadsheet_id,
                service_account_info=load_service_account(),
            )
            logger.info("Sheets client initialized")
    return _client


def reset_sheets_client() -> None:
    """Drop the cached client so the next call builds a new one"""
    global _client
    with _client_lock:
        _client = None
