"""
botengine/leads/sheets.py — Google Sheets lead store with dry-run support.

SheetsLeadStore appends one formatted row per lead to the tenant's
spreadsheet, creating the worksheet (with its header row) on first use.

In dry-run mode (SHEETS_DRY_RUN=true) rows are logged and never written —
safe for development and demos.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import gspread
import requests
from google.auth.exceptions import GoogleAuthError, TransportError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from botengine.clients.registry import SheetConfig
from botengine.config import settings
from botengine.leads.formatting import (
    SHEET_HEADERS,
    LeadData,
    format_lead_row,
    format_timestamp,
    generate_lead_id,
    row_values,
    validate_lead_row,
)

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
_ROW_IN_RANGE = re.compile(r"![A-Z]+(\d+)")


@dataclass
class SubmissionResult:
    success: bool
    lead_id: Optional[str] = None
    row_number: Optional[int] = None
    submitted_at: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class SheetInfo:
    sheet_id: int
    title: str
    row_count: int


def _row_number_from_response(response: Optional[dict]) -> Optional[int]:
    """Extract the written row from an append response ('Leads!A7:R7' → 7)."""
    updated_range = ((response or {}).get("updates") or {}).get("updatedRange", "")
    match = _ROW_IN_RANGE.search(updated_range)
    return int(match.group(1)) if match else None


class SheetsLeadStore:
    """
    Stores leads in per-tenant Google Sheets via a shared service account.

    The gspread client is created lazily so dry-run mode never touches
    credentials.
    """

    def __init__(
        self,
        dry_run: Optional[bool] = None,
        credentials_file: Optional[str] = None,
        client: Optional[gspread.Client] = None,
    ):
        self.dry_run = dry_run if dry_run is not None else settings.sheets_dry_run
        self.credentials_file = credentials_file or settings.google_service_account_file
        self._client = client

    # ── Public API ────────────────────────────────────────────────────────────

    def submit(self, client_id: str, sheet: Optional[SheetConfig], lead: LeadData) -> SubmissionResult:
        """
        Format, validate and append a lead to the tenant's sheet.

        Args:
            client_id: Tenant identifier (also the lead id prefix).
            sheet:     Tenant sheet configuration; None means not configured.
            lead:      Lead captured by the API.

        Returns:
            SubmissionResult — never raises for storage failures.
        """
        lead.lead_id = lead.lead_id or generate_lead_id(client_id)
        lead.timestamp = lead.timestamp or format_timestamp()
        row = format_lead_row(lead)

        errors = validate_lead_row(row)
        if errors:
            logger.warning("Lead %s failed validation: %s", lead.lead_id, errors)
            return SubmissionResult(
                success=False,
                lead_id=lead.lead_id,
                error=f"Lead data validation failed: {', '.join(errors)}",
                error_code="LEAD_VALIDATION_FAILED",
            )

        if self.dry_run:
            logger.info("DRY RUN: lead %s for %s logged (not stored): %s", lead.lead_id, client_id, row)
            return SubmissionResult(success=True, lead_id=lead.lead_id, submitted_at=lead.timestamp)

        if sheet is None:
            logger.error("No sheet configuration found for client: %s", client_id)
            return SubmissionResult(
                success=False,
                lead_id=lead.lead_id,
                error="Storage service unavailable",
                error_code="SHEETS_NOT_CONFIGURED",
            )

        try:
            worksheet = self._get_or_create_worksheet(sheet)
            response = self._append(worksheet, row_values(row))
        except (TransportError, requests.exceptions.RequestException) as exc:
            logger.error("Google Sheets unreachable for %s (lead %s): %s", client_id, lead.lead_id, exc)
            return SubmissionResult(
                success=False,
                lead_id=lead.lead_id,
                error="Storage service unreachable",
                error_code="SHEETS_NETWORK_ERROR",
            )
        except (GoogleAuthError, FileNotFoundError, ValueError) as exc:
            # Missing or malformed service-account credentials
            logger.error("Google Sheets authentication failed for %s (lead %s): %s", client_id, lead.lead_id, exc)
            return SubmissionResult(
                success=False,
                lead_id=lead.lead_id,
                error="Authentication failed",
                error_code="SHEETS_AUTH_FAILED",
            )
        except OSError as exc:
            logger.error("Google Sheets transport error for %s (lead %s): %s", client_id, lead.lead_id, exc)
            return SubmissionResult(
                success=False,
                lead_id=lead.lead_id,
                error="Storage service unreachable",
                error_code="SHEETS_NETWORK_ERROR",
            )
        except gspread.exceptions.GSpreadException as exc:
            logger.error("Google Sheets submission failed for %s (lead %s): %s", client_id, lead.lead_id, exc)
            return SubmissionResult(
                success=False,
                lead_id=lead.lead_id,
                error="Storage service unavailable",
                error_code="SHEETS_SUBMISSION_FAILED",
            )

        row_number = _row_number_from_response(response)
        logger.info("Lead submitted — client=%s lead_id=%s row=%s", client_id, lead.lead_id, row_number)
        return SubmissionResult(
            success=True,
            lead_id=lead.lead_id,
            row_number=row_number,
            submitted_at=lead.timestamp,
        )

    def initialize(self, sheet: SheetConfig) -> SheetInfo:
        """Make sure the tenant worksheet exists with its header row."""
        worksheet = self._get_or_create_worksheet(sheet)
        return SheetInfo(sheet_id=worksheet.id, title=worksheet.title, row_count=worksheet.row_count)

    # ── Private helpers ───────────────────────────────────────────────────────

    @property
    def client(self) -> gspread.Client:
        if self._client is None:
            self._client = gspread.service_account(filename=self.credentials_file, scopes=SCOPES)
        return self._client

    def _get_or_create_worksheet(self, sheet: SheetConfig) -> gspread.Worksheet:
        spreadsheet = self.client.open_by_key(sheet.spreadsheet_id)
        try:
            worksheet = spreadsheet.worksheet(sheet.worksheet_name)
        except gspread.exceptions.WorksheetNotFound:
            logger.info("Creating worksheet %r in %s.", sheet.worksheet_name, sheet.spreadsheet_id)
            worksheet = spreadsheet.add_worksheet(
                title=sheet.worksheet_name, rows=1000, cols=len(SHEET_HEADERS),
            )
            worksheet.append_row(SHEET_HEADERS)
            return worksheet

        if not worksheet.row_values(1):
            worksheet.append_row(SHEET_HEADERS)
        return worksheet

    @staticmethod
    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append(worksheet: gspread.Worksheet, values: list[str]) -> dict:
        return worksheet.append_row(values, value_input_option="USER_ENTERED")
