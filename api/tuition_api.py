from api.api_client import ApiClient


class TuitionAPI:
    """Read-only tuition statistics and transaction views."""

    def __init__(self, client: ApiClient):
        self._client = client

    def get_stats(self, month: str | None = None) -> dict:
        return self._client.get("/tuition/stats", {"month": month})

    def get_trends(self, months: int | None = None) -> dict:
        return self._client.get("/tuition/stats/trends", {"months": months})

    def get_pending_fees(self, month: str | None = None) -> dict:
        return self._client.get("/tuition/stats/pending-fees", {"month": month})

    def get_transactions(self, **filters) -> dict:
        """filters: type, category, startDate, endDate, limit, page."""
        return self._client.get("/tuition/transactions", filters)

    def get_transaction_summary(self, **filters) -> dict:
        """filters: startDate, endDate."""
        return self._client.get("/tuition/transactions/summary", filters)
