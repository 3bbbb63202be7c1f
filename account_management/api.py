"""
Account Management API Endpoints
Cookie-session login for administrators and the back-office order list
"""
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from account_management.auth_service import AuthService
from account_management.models import AdminUser
from account_management.schemas import AdminLogin, AdminOrderResponse, AdminSessionResponse
from core.exceptions import AuthenticationError
from core.logging import get_logger
from database.session import get_db
from storefront.models import Order

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

SESSION_ADMIN_KEY = "admin_id"


# Dependencies
def require_admin(request: Request, db: Session = Depends(get_db)) -> AdminUser:
    """Resolve the signed-in administrator from the session cookie"""
    admin_id = request.session.get(SESSION_ADMIN_KEY)
    if not admin_id:
        raise AuthenticationError()

    admin = db.query(AdminUser).filter(AdminUser.id == admin_id).first()
    if admin is None:
        request.session.clear()
        raise AuthenticationError()
    return admin


@router.post("/login", response_model=AdminSessionResponse)
def login(credentials: AdminLogin, request: Request, db: Session = Depends(get_db)) -> AdminSessionResponse:
    admin = AuthService.authenticate(db, credentials.username, credentials.password)
    if admin is None:
        raise AuthenticationError("Invalid username or password")

    request.session[SESSION_ADMIN_KEY] = admin.id
    logger.info(f"Admin '{admin.username}' signed in")
    return AdminSessionResponse(username=admin.username)


@router.post("/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"authenticated": False}


@router.get("/orders", response_model=List[AdminOrderResponse])
def list_orders(
    limit: int = 100,
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[AdminOrderResponse]:
    """Most recent orders first"""
    orders = db.query(Order).order_by(Order.created_at.desc()).limit(min(max(limit, 1), 500)).all()
    return [
        AdminOrderResponse(
            id=order.id,
            stripe_session_id=order.stripe_session_id,
            status=order.status.value,
            customer_email=order.customer_email,
            total_cents=order.total_cents,
            currency=order.currency,
            created_at=order.created_at,
            confirmed_at=order.confirmed_at,
        )
        for order in orders
    ]
