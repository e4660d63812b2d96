"""Farm areas: named subdivisions of the farm, informational only."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from farmlog.database import Base


class FarmAreaRow(Base):
    __tablename__ = "farm_areas"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    area: Mapped[float] = mapped_column(Float, default=0.0)  # m²
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
