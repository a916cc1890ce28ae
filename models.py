# models.py

import enum
import os
import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List

import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.pool import NullPool
from sqlalchemy import ForeignKey

DATABASE_URL = os.environ.get('DATABASE_URL')
if not DATABASE_URL:
    raise ValueError("Error: the DATABASE_URL environment variable is not set.")

# aiosqlite connections must not be shared between event loops
if DATABASE_URL.startswith("sqlite"):
    engine = create_async_engine(DATABASE_URL, poolclass=NullPool)
else:
    engine = create_async_engine(DATABASE_URL)

async_session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    RESTAURANT_OWNER = "RESTAURANT_OWNER"
    STAFF = "STAFF"
    CUSTOMER = "CUSTOMER"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: str) -> Optional["OrderStatus"]:
        """Returns the status for a case-insensitive name, or None."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


PAYMENT_STATUSES = ("pending", "completed")


class User(Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(sa.String(20), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(sa.String(50))
    last_name: Mapped[Optional[str]] = mapped_column(sa.String(50))
    restaurant_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    address: Mapped[Optional[str]] = mapped_column(sa.String(255))
    role: Mapped[str] = mapped_column(sa.String(20), default=UserRole.RESTAURANT_OWNER.value, nullable=False)
    active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now, onupdate=datetime.now)

    settings: Mapped[Optional["RestaurantSettings"]] = relationship(
        "RestaurantSettings", back_populates="user", uselist=False, lazy='selectin', cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.username


class RestaurantSettings(Base):
    __tablename__ = 'restaurant_settings'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"), unique=True, nullable=False)
    currency: Mapped[str] = mapped_column(sa.String(10), default="TSH")
    timezone: Mapped[str] = mapped_column(sa.String(50), default="Africa/Dar_es_Salaam")
    opening_time: Mapped[str] = mapped_column(sa.String(5), default="08:00")
    closing_time: Mapped[str] = mapped_column(sa.String(5), default="22:00")
    service_charge: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), default=Decimal("0"))
    vat_rate: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), default=Decimal("18"))
    receipt_footer: Mapped[str] = mapped_column(sa.String(255), default="Thank you for dining with us!")
    allow_online_orders: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    auto_accept_orders: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    language: Mapped[str] = mapped_column(sa.String(5), default="en")
    date_format: Mapped[str] = mapped_column(sa.String(20), default="DD/MM/YYYY")
    time_format: Mapped[str] = mapped_column(sa.String(5), default="24h")
    email_notifications: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    sms_notifications: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    order_notifications: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    feedback_notifications: Mapped[bool] = mapped_column(sa.Boolean, default=True)

    user: Mapped["User"] = relationship("User", back_populates="settings")


class MenuItem(Base):
    __tablename__ = 'menu_items'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    category: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(sa.String(255))
    available: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    allergens: Mapped[list] = mapped_column(sa.JSON, default=list)
    prep_time_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    featured: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now, onupdate=datetime.now)

    daily_entries: Mapped[List["DailyMenuEntry"]] = relationship(
        "DailyMenuEntry", back_populates="menu_item", cascade="all, delete-orphan", passive_deletes=True
    )


class DailyMenuEntry(Base):
    __tablename__ = 'daily_menu_entries'
    __table_args__ = (sa.UniqueConstraint('menu_item_id', 'menu_date', name='uq_daily_menu_item_date'),)
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id: Mapped[int] = mapped_column(ForeignKey('menu_items.id', ondelete="CASCADE"), nullable=False)
    menu_date: Mapped[date] = mapped_column(sa.Date, nullable=False, index=True)
    special_price: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    is_available: Mapped[bool] = mapped_column(sa.Boolean, default=True)

    menu_item: Mapped["MenuItem"] = relationship("MenuItem", back_populates="daily_entries", lazy='joined')

    @property
    def effective_price(self) -> Decimal:
        if self.special_price is not None:
            return self.special_price
        return self.menu_item.price


def generate_qr_code_id() -> str:
    return str(uuid.uuid4())


class Table(Base):
    __tablename__ = 'tables'
    __table_args__ = (sa.UniqueConstraint('user_id', 'table_number', name='uq_table_number_per_user'),)
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    table_number: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    is_room: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    location: Mapped[Optional[str]] = mapped_column(sa.String(100))
    qr_code_id: Mapped[str] = mapped_column(sa.String(36), default=generate_qr_code_id, unique=True, index=True)
    qr_code_url: Mapped[Optional[str]] = mapped_column(sa.String(255))
    active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now)


class Order(Base):
    __tablename__ = 'orders'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    table_id: Mapped[Optional[int]] = mapped_column(ForeignKey('tables.id', ondelete="SET NULL"))
    table_number: Mapped[Optional[str]] = mapped_column(sa.String(50))
    device_id: Mapped[Optional[str]] = mapped_column(sa.String(64))
    customer_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    order_number: Mapped[str] = mapped_column(sa.String(32), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(sa.String(20), default=OrderStatus.PENDING.value, nullable=False, index=True)
    payment_status: Mapped[str] = mapped_column(sa.String(20), default="pending", nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), default=Decimal("0.00"))
    tax: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), default=Decimal("0.00"))
    total: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), default=Decimal("0.00"))
    customer_notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now, index=True)
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now, onupdate=datetime.now)
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", lazy='selectin'
    )


class OrderItem(Base):
    __tablename__ = 'order_items'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete="CASCADE"), nullable=False)
    menu_item_id: Mapped[Optional[int]] = mapped_column(ForeignKey('menu_items.id', ondelete="SET NULL"))
    menu_item_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(sa.Integer, default=1)
    special_instructions: Mapped[Optional[str]] = mapped_column(sa.String(255))

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Feedback(Base):
    __tablename__ = 'feedback'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    order_id: Mapped[Optional[int]] = mapped_column(ForeignKey('orders.id', ondelete="SET NULL"))
    order_number: Mapped[Optional[str]] = mapped_column(sa.String(32))
    table_number: Mapped[Optional[str]] = mapped_column(sa.String(50))
    total_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    rating: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now, index=True)


class CustomerSession(Base):
    __tablename__ = 'customer_sessions'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, unique=True, index=True)
    table_id: Mapped[Optional[int]] = mapped_column(ForeignKey('tables.id', ondelete="SET NULL"))
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey('users.id', ondelete="CASCADE"))
    customer_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    customer_phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    visit_count: Mapped[int] = mapped_column(sa.Integer, default=1)
    first_visit: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now)
    last_visit: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.now)


async def create_db_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
