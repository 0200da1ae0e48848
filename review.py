"""Advisory AI review of a timesheet through the Gemini REST API.

The review never changes the timesheet; callers show the result and carry on
if it fails.
"""

from __future__ import annotations

import json
import logging
import os
from decimal import Decimal, InvalidOperation

import requests

from models import PeriodTotals, ReviewResult, TimesheetData
from storage import entry_to_dict

logger = logging.getLogger(__name__)

API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
TIMEOUT = 60

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "managerComment": {
            "type": "STRING",
            "description": "The manager's feedback in character.",
        },
        "detectedIssues": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of specific issues found, if any.",
        },
        "suggestedTotalHours": {
            "type": "NUMBER",
            "description": "Sum of hours calculated by AI based on In/Out times.",
        },
    },
}


class ReviewError(Exception):
    """The review could not be obtained or understood."""


def get_api_key() -> str | None:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")


def timesheet_payload(data: TimesheetData, totals: PeriodTotals) -> dict:
    return {
        "employeeName": data.employee_name,
        "payPeriodEnding": data.pay_period_ending,
        "rows": [entry_to_dict(r) for r in data.rows],
        "regHours": totals.reg_hours,
        "otHours": totals.ot_hours,
        "totalSales": totals.total_sales,
        "totalTips": totals.total_tips,
    }


def build_prompt(data: TimesheetData, totals: PeriodTotals, business_name: str) -> str:
    return f"""
You are a strict but friendly payroll manager at "{business_name}", a retro 1950s diner.
Review the following timesheet data for errors or anomalies.

Timesheet Data:
{json.dumps(timesheet_payload(data, totals), indent=2)}

Tasks:
1. Check if the calculated totals (Reg Hours, Sales, Tips) look roughly consistent with the daily entries.
2. If the hours are blank but In/Out times exist, calculate the total hours (handle AM/PM intelligently).
3. Look for missing signatures or names.
4. Provide a response in the persona of a 1950s diner manager (e.g., calling the user "sugar", "honey", referencing coffee or pie).

Return the response in JSON format.
"""


def parse_review(payload: dict) -> ReviewResult:
    """Convert the model's JSON object to a ReviewResult."""
    issues = payload.get("detectedIssues") or []
    if not isinstance(issues, list):
        issues = [str(issues)]

    suggested = payload.get("suggestedTotalHours")
    hours: Decimal | None = None
    if suggested is not None:
        try:
            hours = Decimal(str(suggested))
        except InvalidOperation:
            hours = None

    return ReviewResult(
        manager_comment=str(payload.get("managerComment") or ""),
        detected_issues=[str(i) for i in issues],
        suggested_total_hours=hours,
    )


def review_timesheet(
    data: TimesheetData,
    totals: PeriodTotals,
    business_name: str,
    model: str = "gemini-2.5-flash",
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> ReviewResult:
    """Send the timesheet for review and return the structured answer.

    Raises ReviewError on any transport, HTTP or decoding failure.
    """
    key = api_key or get_api_key()
    if not key:
        raise ReviewError("No API key configured. Set GEMINI_API_KEY.")

    body = {
        "contents": [{"parts": [{"text": build_prompt(data, totals, business_name)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }
    http = session or requests
    try:
        response = http.post(
            API_URL.format(model=model),
            headers={"x-goog-api-key": key, "Content-Type": "application/json"},
            json=body,
            timeout=TIMEOUT,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.exception("Error reviewing timesheet")
        raise ReviewError(f"Review request failed: {e}") from e

    try:
        text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        payload = json.loads(text or "{}")
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.exception("Unreadable review response")
        raise ReviewError("The review service returned an unreadable answer") from e

    if not isinstance(payload, dict):
        raise ReviewError("The review service returned an unexpected answer")
    logger.info("Timesheet review received with %d issue(s)", len(payload.get("detectedIssues") or []))
    return parse_review(payload)
