from api.api_client import ApiClient
from models.category import Category, categories_for


class CategoryAPI:
    """Server-side category lists; falls back to the built-in table when empty."""

    def __init__(self, client: ApiClient):
        self._client = client

    def _to_model(self, data: dict, workspace: str, type_: str) -> Category:
        return Category(
            key=data.get("key") or data.get("value") or "",
            label=data.get("label") or data.get("name") or "",
            icon=data.get("icon") or "📌",
            type=data.get("type") or type_,
            workspace=workspace,
        )

    def get(self, workspace: str = "personal", type_: str | None = None) -> list[Category]:
        data = self._client.get("/categories", {"workspace": workspace, "type": type_})
        types = [type_] if type_ else ["income", "expense"]
        result: list[Category] = []
        for t in types:
            rows = data.get(t)
            if rows is None and type_:
                rows = data.get("categories")
            if rows:
                result.extend(self._to_model(r, workspace, t) for r in rows if r)
            else:
                result.extend(categories_for(workspace, t))
        return result

    def get_all(self) -> dict:
        return self._client.get("/categories/all")
