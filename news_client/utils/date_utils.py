# news_client/utils/date_utils.py
import calendar
from datetime import datetime
from typing import Optional

from news_client.models import DateRange


def days_in_month(year: int, month: int) -> int:
    """返回指定年月的天数 (闰年二月为 29 天)。"""
    return calendar.monthrange(year, month)[1]


def build_date_range(year: Optional[int], month: Optional[int] = None, day: Optional[int] = None) -> Optional[DateRange]:
    """
    将日期选择器的 年/月/日 选择转换为闭区间日期范围。

    - 选择到日: start == end，例如 2025-01-15,2025-01-15
    - 选择到月: 该月第一天到最后一天，例如 2024-02-01,2024-02-29
    - 只选年份: YYYY-01-01,YYYY-12-31
    - 未选年份: 返回 None

    超出当月天数的日期会被修正为当月最后一天；没有月份时忽略日期。
    """
    if year is None:
        return None

    if month is None:
        return DateRange(start=f"{year:04d}-01-01", end=f"{year:04d}-12-31")

    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")

    last_day = days_in_month(year, month)
    if day is not None:
        day = max(1, min(day, last_day))
        date_str = f"{year:04d}-{month:02d}-{day:02d}"
        return DateRange(start=date_str, end=date_str)

    return DateRange(start=f"{year:04d}-{month:02d}-01", end=f"{year:04d}-{month:02d}-{last_day:02d}")


def end_of_today(now: Optional[datetime] = None) -> str:
    """接口使用的当天结束时间，格式 'YYYY-MM-DD 23:59:59'。"""
    now = now or datetime.now()
    return now.strftime("%Y-%m-%d 23:59:59")
