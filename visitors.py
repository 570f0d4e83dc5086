"""
Visitor log with duplicate-visit suppression.

A beacon fired twice for the same (ip, userAgent, path) within five seconds
counts once: the earlier row's ``date`` is moved forward instead of inserting
a second row. Two concurrent requests can still both insert; the window is a
best-effort filter, not a uniqueness constraint.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends
from pymongo import DESCENDING

from config import Settings, get_settings
from database import VISITORS, Database, get_database, utcnow
from errors import ValidationError
from logging_config import get_logger
from schemas import Visitor
from services import DEFAULT_LIMIT, DEFAULT_PAGE

logger = get_logger("visitors")

DEDUP_WINDOW = timedelta(seconds=5)

STORED = "stored"
DEDUPED = "deduped"


class VisitorLog:
    sort = [("date", DESCENDING), ("createdAt", DESCENDING)]

    def __init__(self, database: Database, timezone: str = "UTC"):
        self.database = database
        try:
            self.tz = ZoneInfo(timezone)
        except ZoneInfoNotFoundError:
            logger.warning("Unknown TIMEZONE %r, using UTC for visitor stats", timezone)
            self.tz = ZoneInfo("UTC")

    def record_visit(
        self,
        ip: Optional[str],
        user_agent: Optional[str],
        path: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Store a visit, or refresh a matching one from the last five seconds."""
        now = now or utcnow()
        path = path or "/"
        collection = self.database.collection(VISITORS)

        window = {"$gte": now - DEDUP_WINDOW, "$lt": now}
        with self.database.operation("visitor dedup lookup"):
            # rows imported with a single timestamp still count as recent
            existing = collection.find_one({
                "ip": ip,
                "userAgent": user_agent,
                "path": path,
                "$or": [{"date": window}, {"createdAt": window}],
            })
            if existing is not None:
                collection.update_one(
                    {"_id": existing["_id"]},
                    {"$set": {"date": now, "updatedAt": now}},
                )
        if existing is not None:
            logger.debug("Duplicate visit within window: ip=%s path=%s", ip, path)
            return DEDUPED

        doc = Visitor(ip=ip, user_agent=user_agent, path=path, date=now).model_dump(by_alias=True)
        doc["createdAt"] = now
        self.database.create_document(VISITORS, doc)
        return STORED

    def stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Visits today and overall.

        Older rows may carry only one of ``date``/``createdAt`` in range, so
        today's figure is the larger of the two counts.
        """
        start, end = self._today_bounds(now or utcnow())
        by_date = self.database.count_documents(VISITORS, {"date": {"$gte": start, "$lt": end}})
        by_created = self.database.count_documents(VISITORS, {"createdAt": {"$gte": start, "$lt": end}})
        total = self.database.count_documents(VISITORS)
        return {"today": max(by_date, by_created), "total": total}

    def list(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Tuple[List[Dict[str, Any]], int]:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers", fields=["page", "limit"])
        items = self.database.get_documents(VISITORS, sort=self.sort, skip=(page - 1) * limit, limit=limit)
        return items, self.database.count_documents(VISITORS)

    def _today_bounds(self, now: datetime) -> Tuple[datetime, datetime]:
        """Local midnight to midnight, as naive UTC."""
        utc = ZoneInfo("UTC")
        local_now = now.replace(tzinfo=utc).astimezone(self.tz)
        local_start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        local_end = local_start + timedelta(days=1)
        start = local_start.astimezone(utc).replace(tzinfo=None)
        end = local_end.astimezone(utc).replace(tzinfo=None)
        return start, end


def get_visitor_log(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> VisitorLog:
    return VisitorLog(database, settings.timezone)
