# backend/routes/settings.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from database import get_db
from models.settings import AppSettings
from models.users import User
from utils.tokenJWT import get_current_user, is_admin
from utils.audit import write_log, client_ip
from utils.app_settings import get_app_settings
from schemas.settings import AppSettingsOut, AppSettingsUpdate

router = APIRouter(prefix="/settings", tags=["Settings"])


# Effective settings, stored values over environment defaults
@router.get("", response_model=AppSettingsOut)
def read_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_app_settings(db)


# Update application settings (Admin only)
@router.patch("", response_model=AppSettingsOut)
def update_settings(
    payload: AppSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Admin access required")

    row = db.query(AppSettings).first()
    if not row:
        row = AppSettings()
        db.add(row)

    changes = payload.model_dump(exclude_unset=True)
    if "currency" in changes and changes["currency"] is not None:
        changes["currency"] = changes["currency"].upper()
    for field, value in changes.items():
        setattr(row, field, value)

    db.commit()

    write_log(
        db,
        user_id=current_user.id,
        action="SETTINGS_UPDATE",
        resource="settings",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"fields": sorted(changes.keys())},
    )
    return get_app_settings(db)
