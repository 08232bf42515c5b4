from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from database import get_db
from schemas.profile import ProfileOut, ProfileResponse, ProfileUpdateIn
from services.ledger import LedgerError, NotFoundError, get_profile, update_profile
from endpoints.errors import error_response, ledger_error_response
from endpoints.logs import log_action, log_error, log_request, log_warning

router = APIRouter(prefix="/profiles", tags=["profiles"])

@router.get("", response_model=ProfileResponse)
async def read_profile(request: Request, db: Session = Depends(get_db)):
    """
    Return the account profile.
    Holdings are revalued at the latest stored prices the first time the profile is read each day.
    """
    correlation_id = await log_request(request, "read_profile")
    try:
        profile = get_profile(db)
    except NotFoundError:
        return error_response("User not found", 404)
    except LedgerError as e:
        log_error("read_profile_failed", e, correlation_id)
        return ledger_error_response(e)
    except Exception as e:
        log_error("read_profile_failed", e, correlation_id)
        return error_response(f"Unexpected error: {str(e)}", 500)
    return ProfileResponse(data=ProfileOut.from_model(profile))

@router.put("/{profile_id}", response_model=ProfileResponse)
async def edit_profile(profile_id: str, body: ProfileUpdateIn, request: Request, db: Session = Depends(get_db)):
    """Update username and/or avatar URL. Balances are not editable here."""
    correlation_id = await log_request(request, "edit_profile", {"profile_id": profile_id, **body.model_dump()})
    try:
        profile = update_profile(db, profile_id, username=body.username, avatar_url=body.avatarUrl)
    except LedgerError as e:
        log_warning("edit_profile_rejected", correlation_id, {"reason": e.message, "type": type(e).__name__})
        return ledger_error_response(e)
    except Exception as e:
        log_error("edit_profile_failed", e, correlation_id)
        return error_response(f"Unexpected error: {str(e)}", 500)

    log_action("profile_updated", correlation_id, {"profile_id": profile_id})
    return ProfileResponse(data=ProfileOut.from_model(profile))
