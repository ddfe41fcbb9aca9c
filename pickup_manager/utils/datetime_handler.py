"""
DateTime Handler module for consistent date and time handling throughout the application.
"""
from datetime import datetime, date, timezone
from typing import Union, Optional


class DateTimeHandler:
    """
    Centralized date helpers. All datetimes are timezone aware and in UTC;
    dates are displayed in the fr-CA form YYYY-MM-DD.
    """

    DATE_FORMAT = "%Y-%m-%d"
    DATETIME_LABEL_FORMAT = "%Y-%m-%d %H:%M"
    FILE_STAMP_FORMAT = "%Y%m%d%H%M%S"

    @classmethod
    def get_current_datetime(cls) -> datetime:
        return datetime.now(timezone.utc)

    @classmethod
    def to_date(cls, value: Union[date, datetime]) -> date:
        """Calendar day of a datetime (in its own timezone), or the date unchanged."""
        if isinstance(value, datetime):
            return value.date()
        return value

    @classmethod
    def format_date(cls, value: Union[date, datetime, None]) -> Optional[str]:
        """
        Format a date or datetime as YYYY-MM-DD.

        Returns:
            The formatted day, or None when no value is given
        """
        if value is None:
            return None
        return cls.to_date(value).strftime(cls.DATE_FORMAT)

    @classmethod
    def format_datetime(cls, value: Optional[datetime]) -> str:
        if value is None:
            return ""
        return value.strftime(cls.DATETIME_LABEL_FORMAT)

    @classmethod
    def timestamp_millis(cls) -> int:
        """Milliseconds since the epoch, used for fallback request numbers and attachment paths."""
        return int(cls.get_current_datetime().timestamp() * 1000)

    @classmethod
    def file_stamp(cls) -> str:
        """Compact timestamp for export file names."""
        return cls.get_current_datetime().strftime(cls.FILE_STAMP_FORMAT)
