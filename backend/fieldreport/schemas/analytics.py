"""Chart-ready analytics payloads"""

from typing import List

from pydantic import BaseModel

from fieldreport.schemas.base import CamelModel


class ChartData(BaseModel):
    labels: List[str]
    data: List[int]


class MonthlyChartData(ChartData):
    year: int


class SummaryResponse(CamelModel):
    total_submissions: int
    total_users: int
    today_submissions: int
    this_month_submissions: int
