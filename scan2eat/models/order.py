import sqlalchemy as sa
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB

from scan2eat.core.database import Base

ORDER_STATUSES = ("pending", "cooking", "ready", "completed")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    table_id = Column(Integer, index=True, nullable=False)

    # value snapshot taken at order time: [{name, qty, price, note}]
    items = Column(JSONB().with_variant(sa.JSON(), "sqlite"), nullable=False)
    total = Column(Float, default=0.0, nullable=False)

    status = Column(String(20), default="pending", nullable=False, index=True)
    paid = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
