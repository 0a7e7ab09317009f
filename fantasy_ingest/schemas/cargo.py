from pydantic import BaseModel, ConfigDict

from fantasy_ingest.utils.cargo_filter import CargoFilter


class CargoQuery(BaseModel):
    """A single ``action=cargoquery`` request."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tables: str
    fields: list[str]
    where: CargoFilter | None = None
    order_by: str | None = None
    limit: int | None = None

    def to_params(self) -> dict[str, str]:
        params = {
            "action": "cargoquery",
            "format": "json",
            "tables": self.tables,
            "fields": ", ".join(self.fields),
        }
        if self.where is not None:
            params["where"] = self.where.render()
        if self.order_by:
            params["order_by"] = self.order_by
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params
