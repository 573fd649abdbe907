"""API response schemas -- shaped for the Pinterest trends frontend."""

from typing import List

from pydantic import BaseModel, Field

from pintrends.schemas.trends import TrendRecord


# -- Trends --

class HistoryPointResponse(BaseModel):
    date: str
    value: float


class TrendResponse(BaseModel):
    keyword: str
    category: str
    momentum_score: int
    search_volume: int
    related_keywords: List[str] = Field(default_factory=list)
    historical_data: List[HistoryPointResponse] = Field(default_factory=list)
    source: str
    resolved_at: str

    @classmethod
    def from_record(cls, record: TrendRecord) -> "TrendResponse":
        return cls(
            keyword=record.keyword,
            category=record.category,
            momentum_score=record.momentum_score,
            search_volume=record.search_volume,
            related_keywords=list(record.related_keywords),
            historical_data=[
                HistoryPointResponse(date=p.date, value=p.value) for p in record.historical_data
            ],
            source=record.source.value,
            resolved_at=record.resolved_at.isoformat(),
        )


class SeedResponse(BaseModel):
    status: str
    seeded: int
