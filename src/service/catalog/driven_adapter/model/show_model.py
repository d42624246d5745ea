from datetime import datetime
from decimal import Decimal
import uuid

from sqlalchemy import BigInteger, DateTime, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class ShowModel(Base):
    __tablename__ = 'show'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    movie_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey('movie.id'), nullable=False, index=True
    )
    show_date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    show_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f'<ShowModel(id={self.id}, movie_id={self.movie_id}, at={self.show_date_time})>'
