# database.py
from datetime import datetime, timezone

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Numeric,
    DateTime,
    ForeignKey,
    Boolean,
)
from sqlalchemy.orm import sessionmaker, declarative_base, relationship
from sqlalchemy.ext.orderinglist import ordering_list

from config import get_settings

# Money columns; shares of an equal split are kept to this scale
MONEY = Numeric(18, 6, asdecimal=True)


def make_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


engine = make_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class Expense(Base):
    __tablename__ = "expenses"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, index=True, nullable=False)
    amount = Column(MONEY, nullable=False)
    amount_left_to_be_paid = Column(MONEY, nullable=False, default=0)
    category = Column(String, index=True, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)
    description = Column(String, nullable=True)

    split_details = relationship(
        "SplitDetail",
        back_populates="expense",
        order_by="SplitDetail.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )


class SplitDetail(Base):
    __tablename__ = "split_details"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    expense_id = Column(
        Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False)
    # Only set for registered users
    user_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    share = Column(MONEY, nullable=False)
    has_paid = Column(Boolean, nullable=False, default=False)

    expense = relationship("Expense", back_populates="split_details")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
