"""
api/endpoints/pricing_routes.py — Quote and service-area routes.

POST /api/calculate-price   — Price range for questionnaire responses
POST /api/validate-pincode  — Service availability for a pincode
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from api.deps import error_detail, require_client
from api.schemas import PincodeResponse, QuoteResponse
from botengine.config import settings
from botengine.db import repository
from botengine.db.session import get_db
from botengine.geo.radius import is_within_radius
from botengine.pricing import service_area
from botengine.security.auth import AuthContext
from botengine.security.sanitize import sanitize_input, validate_fields, validate_request_data
from botengine.services import quote_service

logger = logging.getLogger(__name__)
router = APIRouter()

SERVICEABLE_MESSAGE = "Great! We provide services in your area."
UNSERVICEABLE_MESSAGE = "Sorry, we don't service this area yet. We'll notify you when available."


@router.post("/calculate-price", response_model=QuoteResponse, summary="Calculate a project quote")
def calculate_price(
    payload: dict = Body(...),
    auth: AuthContext = Depends(require_client("calculate-price")),
    db: Session = Depends(get_db),
):
    """
    Price a project from questionnaire responses.

    Body: {responses, botType, clientType, sessionId?, timestamp?}.
    Only the range, currency and specialist are returned; the individual
    factors stay server-side.
    """
    data = sanitize_input(payload)
    validation = validate_request_data(
        data,
        required=("responses", "botType", "clientType"),
        optional=("sessionId", "timestamp"),
    )
    errors = list(validation.errors)
    if isinstance(data.get("responses"), dict):
        errors += validate_fields(data["responses"])
    if errors:
        raise HTTPException(
            status_code=400,
            detail=error_detail("Invalid request data", "VALIDATION_ERROR", details=errors),
        )

    bot_type = data["botType"]
    outcome = quote_service.calculate_quote(data["responses"], bot_type, data["clientType"])
    if not outcome.success:
        raise HTTPException(
            status_code=500,
            detail=error_detail(
                "Pricing calculation failed", "PRICING_FAILED", fallbackQuote=outcome.fallback_quote,
            ),
        )

    repository.record_usage(
        db,
        client_id=auth.client.client_id,
        endpoint=auth.endpoint,
        action="price_calculation",
        details={
            "botType": bot_type,
            "clientType": data["clientType"],
            "finalPrice": outcome.estimate.final_price,
            "sessionId": data.get("sessionId"),
        },
    )
    return quote_service.quote_payload(outcome.estimate, bot_type)


@router.post(
    "/validate-pincode",
    response_model=PincodeResponse,
    response_model_exclude_none=True,
    summary="Check service availability",
)
def validate_pincode(
    payload: dict = Body(...),
    auth: AuthContext = Depends(require_client("validate-pincode")),
    db: Session = Depends(get_db),
):
    """
    Classify a pincode for the tenant's service category (or serviceType).

    When geocoding is enabled and the tenant has a location, the response
    also says whether the pincode is inside the tenant's service radius.
    """
    data = sanitize_input(payload)
    validation = validate_request_data(data, required=("pincode",), optional=("serviceType",))
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail=error_detail("Invalid pincode provided", "VALIDATION_ERROR", details=validation.errors),
        )

    pincode = str(data["pincode"])
    service_type = data.get("serviceType") or auth.client.service_category
    result = service_area.classify(pincode, service_type)

    body = {
        "success": True,
        **result.to_dict(),
        "message": SERVICEABLE_MESSAGE if result.serviceable else UNSERVICEABLE_MESSAGE,
    }
    if settings.geocoding_enabled and auth.client.location is not None:
        body["withinRadius"] = is_within_radius(pincode, auth.client.location)

    repository.record_usage(
        db,
        client_id=auth.client.client_id,
        endpoint=auth.endpoint,
        action="pincode_validation",
        details={"pincode": pincode, "serviceType": service_type, "isServiceable": result.serviceable},
    )
    return body
