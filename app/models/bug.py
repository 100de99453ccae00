"""버그 SQLAlchemy ORM 모델 정의.

Bug SQLAlchemy ORM model definition.
A bug is scored on the 5x5 risk matrix by impact and likelihood.
Timestamps are stored as millisecond UNIX epochs (BIGINT), matching the
values the clients send and display.

Tables:
    - bugs: 버그 레코드 (Bug records, the only table)
"""

import uuid
from enum import Enum

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class BugLabel(str, Enum):
    """버그 분류 라벨 — 고정된 6개 값 (Closed set of bug labels)."""

    PAYMENT_ORDERS = "Betaalopdrachten"
    PAYMENT_REQUESTS_PARRO = "Betaalverzoeken Parro"
    PAYMENT_REQUESTS_EMAIL = "Betaalverzoeken Email"
    TSO = "TSO"
    ACCOUNTS_LOGIN = "Accounts / login"
    ADMIN_SETTINGS = "Beheer & Instellingen"


class Bug(Base):
    """버그 모델 — 리스크 매트릭스에 표시되는 결함 레코드.

    Bug model — A defect record shown on the risk matrix.
    A reference bug is a fixed anchor: it can be edited but never
    completed or deleted.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier, immutable)
        ticket: 티켓 번호 (Optional ticket number)
        description: 버그 설명 (Required description)
        jira_link: Jira 링크 (Optional Jira URL, free text)
        impact: 영향도 1~5 (Impact rating)
        likelihood: 발생 가능성 1~5 (Likelihood rating)
        label: 분류 라벨 (One of BugLabel, optional)
        created_at: 생성 시각 ms epoch (Creation time, never changed)
        completed_at: 완료 시각 ms epoch (Completion time, set once)
        reference: 참조 버그 여부 (Reference flag)
    """

    __tablename__ = "bugs"
    __table_args__ = (
        CheckConstraint("impact BETWEEN 1 AND 5", name="ck_bugs_impact_range"),
        CheckConstraint("likelihood BETWEEN 1 AND 5", name="ck_bugs_likelihood_range"),
        Index("ix_bugs_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    jira_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    impact: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    likelihood: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Betaalopdrachten, Betaalverzoeken Parro, Betaalverzoeken Email, TSO, Accounts / login, Beheer & Instellingen
    label: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    completed_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    reference: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
