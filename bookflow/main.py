import logging

from fastapi import FastAPI

from bookflow.api.v1.booking import router as booking_router
from bookflow.api.v1.search import router as search_router
from bookflow.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in (
            "session_id", "step", "next_step", "service_id", "booking_id",
            "query", "sort_by", "results", "status", "error", "owner_id", "url",
        ):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Bookflow", version="1.0.0")

app.include_router(booking_router, prefix="/api/v1/booking", tags=["booking"])
app.include_router(search_router, prefix="/api/v1", tags=["search"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
