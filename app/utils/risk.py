"""리스크 점수 계산 유틸리티 모듈.

Risk scoring utility module.
Maps an (impact, likelihood) pair on the 5x5 risk matrix to a score,
a category band, a cell color and a short handling guideline.

Bands:
    score <= 4   → Low
    5 ~ 8        → Medium
    9 ~ 12       → High
    score >= 13  → Critical

Inputs are assumed to be already coerced into the 1~5 range.
"""

from enum import Enum

from pydantic import BaseModel

MIN_RATING: int = 1
MAX_RATING: int = 5


class RiskCategory(str, Enum):
    """리스크 등급 (Risk category band)."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# 등급별 셀 색상 (Matrix cell color per category)
RISK_COLORS: dict[RiskCategory, str] = {
    RiskCategory.LOW: "#d1fae5",
    RiskCategory.MEDIUM: "#fef9c3",
    RiskCategory.HIGH: "#ffedd5",
    RiskCategory.CRITICAL: "#fee2e2",
}

# 등급별 처리 지침 (Handling guideline per category)
RISK_LEGEND: dict[RiskCategory, str] = {
    RiskCategory.CRITICAL: "Drop everything and start right away",
    RiskCategory.HIGH: "Pick up within two days",
    RiskCategory.MEDIUM: "Pick up within the week",
    RiskCategory.LOW: "Whenever convenient, no rush",
}

# 축 라벨 — 인덱스 0 = 등급 1 (Axis labels, index 0 = rating 1)
IMPACT_LABELS: tuple[str, ...] = ("Not noticeable", "Minor", "Moderate", "Major", "Disastrous")
LIKELIHOOD_LABELS: tuple[str, ...] = ("Yearly", "Monthly", "Weekly", "Daily", "More than daily")


class RiskAssessment(BaseModel):
    """리스크 평가 결과.

    Result of scoring one (impact, likelihood) pair.

    Attributes:
        score: impact × likelihood (1~25)
        category: 리스크 등급 (Risk category band)
        color: 매트릭스 셀 색상 (Matrix cell color)
    """

    score: int
    category: RiskCategory
    color: str


def risk_score(impact: int, likelihood: int) -> int:
    """리스크 점수 = impact × likelihood."""
    return impact * likelihood


def risk_category(score: int) -> RiskCategory:
    """점수를 리스크 등급으로 분류합니다.

    Classify a risk score into its category band.

    Args:
        score: 리스크 점수 (Risk score, 1~25)

    Returns:
        RiskCategory: 해당 등급 (Matching category)
    """
    if score <= 4:
        return RiskCategory.LOW
    if score <= 8:
        return RiskCategory.MEDIUM
    if score <= 12:
        return RiskCategory.HIGH
    return RiskCategory.CRITICAL


def risk_color(score: int) -> str:
    return RISK_COLORS[risk_category(score)]


def assess_risk(impact: int, likelihood: int) -> RiskAssessment:
    """impact/likelihood 쌍에 대한 전체 평가를 반환합니다.

    Score and classify an (impact, likelihood) pair in one call.
    """
    score: int = risk_score(impact, likelihood)
    category: RiskCategory = risk_category(score)
    return RiskAssessment(score=score, category=category, color=RISK_COLORS[category])
