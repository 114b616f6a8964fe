"""Google Sheets sink that appends one row per enriched event."""

import asyncio
import logging
from collections.abc import Sequence

import gspread
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsClient:
    """Appends event records to the first worksheet of a spreadsheet."""

    def __init__(self, service_account_email: str, private_key: str, sheet_id: str) -> None:
        """
        Args:
            service_account_email: Service account client email
            private_key: Service account PEM private key
            sheet_id: Spreadsheet key from its URL
        """
        self.service_account_email = service_account_email
        self.private_key = private_key
        self.sheet_id = sheet_id
        self._worksheet: gspread.Worksheet | None = None

    async def append_event(self, record: dict[str, str], headers: Sequence[str]) -> bool:
        """
        Append *record* as a new row.

        If the sheet has no header row yet, *headers* is written first. Values
        are ordered by the sheet's own header row.

        Returns:
            True on success, False on any error (logged, not raised)
        """
        try:
            await asyncio.to_thread(self._append_sync, record, list(headers))
        except Exception as e:
            logger.error(
                f"Sheets: Error saving {record.get('event_title')!r}: {e}",
                exc_info=True,
            )
            return False

        logger.info(f"Sheets: Saved {record.get('event_title')!r}")
        return True

    def _append_sync(self, record: dict[str, str], headers: list[str]) -> None:
        worksheet = self._get_worksheet()

        header_row = worksheet.row_values(1)
        if not header_row:
            logger.info("Sheets: Sheet is empty, writing header row")
            worksheet.append_row(headers)
            header_row = headers

        worksheet.append_row(
            [record.get(column, "") for column in header_row],
            value_input_option="USER_ENTERED",
        )

    def _get_worksheet(self) -> gspread.Worksheet:
        if self._worksheet is None:
            credentials = Credentials.from_service_account_info(
                {
                    "client_email": self.service_account_email,
                    "private_key": self.private_key,
                    "token_uri": TOKEN_URI,
                },
                scopes=SCOPES,
            )
            client = gspread.authorize(credentials)
            self._worksheet = client.open_by_key(self.sheet_id).sheet1
        return self._worksheet
