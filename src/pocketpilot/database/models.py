"""SQLAlchemy models for the pocketpilot database.

Every table carries ``user_id``; all reads and writes are scoped by it.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(12, 2)


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Financial account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default="Checking")
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_account_owner_name"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")
    csv_formats = relationship("CSVFormat", back_populates="account", cascade="all, delete-orphan")
    recurring_transactions = relationship(
        "RecurringTransaction", back_populates="account", cascade="all, delete-orphan"
    )
    transaction_templates = relationship(
        "TransactionTemplate", back_populates="account", cascade="all, delete-orphan"
    )


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    category_type = Column(String, nullable=False, default="expense")
    is_tax_related = Column(Boolean, default=False, nullable=False)
    tax_tag = Column(String, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model. Negative amounts are expenses."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    date = Column(Date, nullable=False)
    amount = Column(MONEY, nullable=False)
    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    is_transfer = Column(Boolean, default=False, nullable=False)
    linked_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    is_split_parent = Column(Boolean, default=False, nullable=False)
    split_group_id = Column(String, nullable=True, index=True)
    split_parent_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    recurring_transaction_id = Column(
        Integer, ForeignKey("recurring_transactions.id"), nullable=True
    )
    created_at = Column(DateTime, default=_now, nullable=False)

    # One generated transaction per template occurrence
    __table_args__ = (
        UniqueConstraint("recurring_transaction_id", "date", name="uq_recurring_occurrence"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    tag_links = relationship("TransactionTag", back_populates="transaction", cascade="all, delete-orphan")
    outgoing_links = relationship(
        "TransactionLink",
        foreign_keys="TransactionLink.source_transaction_id",
        cascade="all, delete-orphan",
    )
    incoming_links = relationship(
        "TransactionLink",
        foreign_keys="TransactionLink.target_transaction_id",
        cascade="all, delete-orphan",
    )


class CategorizationRule(Base):
    """Ordered description-matching rule."""

    __tablename__ = "categorization_rules"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    rule_order = Column(Integer, nullable=False)
    rule_type = Column(String, nullable=False)
    pattern = Column(String, nullable=False)
    case_sensitive = Column(Boolean, default=False, nullable=False)
    target_category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "rule_order", name="uq_rule_owner_order"),)

    target_category = relationship("Category")


class Budget(Base):
    """Monthly budget for one category."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    amount = Column(MONEY, nullable=False)
    rollover = Column(Boolean, default=False, nullable=False)
    alert_threshold = Column(Integer, default=90, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "category_id", name="uq_budget_owner_category"),)

    category = relationship("Category")


class Goal(Base):
    """Savings goal model."""

    __tablename__ = "goals"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    target_amount = Column(MONEY, nullable=False)
    current_amount = Column(MONEY, nullable=False, default=0)
    target_date = Column(Date, nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(Date, nullable=True)
    category = Column(String, nullable=True)
    is_shared = Column(Boolean, default=False, nullable=False)
    share_token = Column(String, nullable=True, unique=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    contributions = relationship("GoalContribution", back_populates="goal", cascade="all, delete-orphan")
    milestones = relationship("GoalMilestone", back_populates="goal", cascade="all, delete-orphan")


class GoalContribution(Base):
    """Contribution toward a goal."""

    __tablename__ = "goal_contributions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False)
    amount = Column(MONEY, nullable=False)
    date = Column(Date, nullable=False)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    goal = relationship("Goal", back_populates="contributions")


class GoalMilestone(Base):
    """Percentage checkpoint of a goal."""

    __tablename__ = "goal_milestones"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False)
    name = Column(String, nullable=False)
    target_percentage = Column(Integer, nullable=False)
    celebration_shown = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    goal = relationship("Goal", back_populates="milestones")


class RecurringTransaction(Base):
    """Template for scheduled transactions."""

    __tablename__ = "recurring_transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    description = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    frequency = Column(String, nullable=False)
    next_occurrence_date = Column(Date, nullable=False)
    last_created_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    account = relationship("Account", back_populates="recurring_transactions")


class TransactionTemplate(Base):
    """Saved transaction applied on demand. Amount is stored positive."""

    __tablename__ = "transaction_templates"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    amount = Column(MONEY, nullable=False)
    kind = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_favorite = Column(Boolean, default=False, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_template_owner_name"),)

    account = relationship("Account", back_populates="transaction_templates")
    tag_links = relationship("TemplateTag", back_populates="template", cascade="all, delete-orphan")


class TemplateTag(Base):
    """Tag copied onto every transaction created from a template."""

    __tablename__ = "template_tags"

    id = Column(Integer, primary_key=True)
    template_id = Column(Integer, ForeignKey("transaction_templates.id"), nullable=False)
    tag_id = Column(Integer, ForeignKey("tags.id"), nullable=False)

    __table_args__ = (UniqueConstraint("template_id", "tag_id", name="uq_template_tag"),)

    template = relationship("TransactionTemplate", back_populates="tag_links")
    tag = relationship("Tag", back_populates="template_links")


class TransactionLink(Base):
    """Directed relationship between two transactions."""

    __tablename__ = "transaction_links"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    source_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    target_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    link_type = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "source_transaction_id", "target_transaction_id", "link_type", name="uq_transaction_link"
        ),
    )


class Tag(Base):
    """Transaction label."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default="#6b7280")
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tag_owner_name"),)

    transaction_links = relationship("TransactionTag", back_populates="tag", cascade="all, delete-orphan")
    template_links = relationship("TemplateTag", back_populates="tag", cascade="all, delete-orphan")


class TransactionTag(Base):
    """Association between a transaction and a tag."""

    __tablename__ = "transaction_tags"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    tag_id = Column(Integer, ForeignKey("tags.id"), nullable=False)

    __table_args__ = (UniqueConstraint("transaction_id", "tag_id", name="uq_transaction_tag"),)

    transaction = relationship("Transaction", back_populates="tag_links")
    tag = relationship("Tag", back_populates="transaction_links")


class CSVFormat(Base):
    """CSV import format definition."""

    __tablename__ = "csv_formats"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    is_debit_credit_format = Column(Boolean, default=False, nullable=False)
    date_format = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_csv_format_owner_name"),)

    account = relationship("Account", back_populates="csv_formats")
    column_mappings = relationship(
        "CSVColumnMapping", back_populates="format", cascade="all, delete-orphan"
    )


class CSVColumnMapping(Base):
    """CSV column to transaction field mapping."""

    __tablename__ = "csv_column_mappings"

    id = Column(Integer, primary_key=True)
    format_id = Column(Integer, ForeignKey("csv_formats.id"), nullable=False)
    csv_column_name = Column(String, nullable=False)
    db_field_name = Column(String, nullable=False)
    is_required = Column(Boolean, default=False, nullable=False)

    format = relationship("CSVFormat", back_populates="column_mappings")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory, creating tables if needed."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # API requests run in a worker thread
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, pool_pre_ping=True, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
