from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scan2eat.core.database import get_db
from scan2eat.deps import require_role
from scan2eat.schemas.orders import SalesSummaryOut
from scan2eat.services.access import CASHIER_ONLY, Role
from scan2eat.services.orders import sales_summary

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/today", response_model=SalesSummaryOut)
def today_sales_summary(
    db: Session = Depends(get_db),
    _role: Role = Depends(require_role(CASHIER_ONLY)),
):
    """Completed orders and revenue since local midnight."""
    return sales_summary(db)
