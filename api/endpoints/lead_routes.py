"""
api/endpoints/lead_routes.py — Lead submission route.

POST /api/submit-lead — Store a qualified lead in the tenant's sheet
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from api.deps import client_ip, error_detail, get_lead_store, require_client
from api.schemas import LeadSubmissionResponse
from botengine.config import settings
from botengine.db.session import get_db
from botengine.leads.sheets import SheetsLeadStore
from botengine.security.auth import AuthContext
from botengine.security.sanitize import sanitize_input, validate_fields, validate_request_data
from botengine.services import lead_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/submit-lead", response_model=LeadSubmissionResponse, summary="Submit a lead")
def submit_lead(
    request: Request,
    payload: dict = Body(...),
    auth: AuthContext = Depends(require_client("submit-lead")),
    db: Session = Depends(get_db),
    store: SheetsLeadStore = Depends(get_lead_store),
):
    """
    Validate a lead, record it in the ledger and append it to the tenant sheet.

    Body: {userData{name, phone, email}, responses, pricing, botType,
    clientId, sessionId?, marketingConsent?}. clientId must be the
    authenticated tenant.
    """
    data = sanitize_input(payload)
    validation = validate_request_data(
        data,
        required=("userData", "responses", "pricing", "botType", "clientId"),
        optional=("sessionId", "marketingConsent"),
    )
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail=error_detail("Incomplete lead data", "VALIDATION_ERROR", details=validation.errors),
        )

    user_data = data["userData"]
    missing = lead_service.missing_user_fields(user_data)
    if missing:
        raise HTTPException(
            status_code=400,
            detail=error_detail("Name, phone, and email are required", "VALIDATION_ERROR", details=missing),
        )
    errors = validate_fields(user_data) + validate_fields(data["responses"])
    if errors:
        raise HTTPException(
            status_code=400,
            detail=error_detail("Invalid lead data", "VALIDATION_ERROR", details=errors),
        )

    if data["clientId"] != auth.client.client_id:
        logger.warning("Client %s tried to submit a lead for %s.", auth.client.client_id, data["clientId"])
        raise HTTPException(
            status_code=403,
            detail=error_detail("Client ID does not match API key", "CLIENT_MISMATCH"),
        )

    lead = lead_service.build_lead_data(
        user_data,
        data["responses"],
        data["pricing"],
        persona_id=data["botType"],
        client_id=auth.client.client_id,
        session_id=data.get("sessionId"),
        marketing_consent=data.get("marketingConsent", False),
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    result = lead_service.submit_lead(db, store, auth.client, lead)

    if not result.success:
        raise HTTPException(
            status_code=500,
            detail=error_detail(
                "Failed to submit lead. Please try again.",
                result.error_code,
                supportContact=settings.support_contact,
            ),
        )

    return {
        "success": True,
        "message": "Thank you! Your quote request has been submitted successfully.",
        "leadId": result.lead_id,
        "estimatedResponse": "24 hours",
        "nextSteps": "Our design specialist will contact you within 24 hours to discuss your project.",
    }
