from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query

from .analytics.summary import compute_summary
from .catalog.models import (
    CuratedItem,
    Dish,
    DishCategory,
    DishRestaurantLink,
    ItemType,
    Municipality,
    Restaurant,
    ScopeFilters,
)
from .error_handlers import register_error_handlers
from .linking.manager import BulkLinkResult
from .listing.models import ListQuery, PriceBucket, SearchFields, SortKey
from .listing.pipeline import run_pipeline
from .ranking.engine import RankOutcome, ranked_slots, validate_rank, validate_scope
from .schemas import BulkLinkRequest, LinkRequest, RankRequest
from .services import Services, get_services

app = FastAPI(title="Featured Curation API", version="1.0.0")
register_error_handlers(app)


async def _municipality_names(services: Services) -> dict[int, str]:
    rows = await services.cache.get_or_fetch_municipalities(services.gateway.fetch_municipalities)
    return {m.id: m.name for m in rows}


async def _list_view(
    services: Services,
    item_type: ItemType,
    municipality_id: int | None,
    query: ListQuery,
) -> list[CuratedItem]:
    # Category is left to the pipeline so switching tabs reuses one snapshot
    filters = ScopeFilters(item_type=item_type, municipality_id=municipality_id)
    items = await services.cache.get_or_fetch(filters, services.gateway.fetch_items)
    names: dict[int, str] = {}
    if query.q.strip() and query.fields.include_municipality:
        names = await _municipality_names(services)
    return run_pipeline(items, query, names)


async def _load_item(services: Services, item_type: ItemType, item_id: int) -> CuratedItem:
    rows = await services.gateway.fetch_items(ScopeFilters(item_type=item_type, item_id=item_id))
    if not rows:
        raise HTTPException(status_code=404, detail=f"{item_type.value} {item_id} not found")
    return rows[0]


async def _set_rank(
    services: Services, item_type: ItemType, item_id: int, body: RankRequest,
) -> RankOutcome:
    validate_rank(body.rank)
    item = await _load_item(services, item_type, item_id)
    validate_scope(item)
    # Conflict detection needs the current scope, never the cached snapshot
    scope_items = await services.gateway.fetch_items(ScopeFilters.for_scope(item))

    def decide(_holder: CuratedItem) -> bool:
        return bool(body.confirm)

    return await services.engine.set_rank(
        item, body.rank, scope_items,
        decide=decide if body.confirm is not None else None,
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/municipalities", response_model=list[Municipality])
async def municipalities(services: Services = Depends(get_services)) -> list[Municipality]:
    return await services.cache.get_or_fetch_municipalities(services.gateway.fetch_municipalities)


@app.get("/dishes", response_model=list[Dish])
async def dishes(
    municipality_id: int | None = None,
    category: str = "all",
    q: str = "",
    price: PriceBucket = PriceBucket.all,
    dietary: str | None = Query(default=None, description="Comma-separated tags, all required"),
    spice_level: str = "all",
    sort: SortKey = SortKey.popularity,
    include_description: bool = True,
    include_ingredients: bool = True,
    include_municipality: bool = True,
    services: Services = Depends(get_services),
) -> list[CuratedItem]:
    query = ListQuery(
        q=q,
        fields=SearchFields(
            include_description=include_description,
            include_ingredients=include_ingredients,
            include_municipality=include_municipality,
        ),
        category=category,
        price=price,
        dietary=dietary,
        spice_level=spice_level,
        sort=sort,
    )
    return await _list_view(services, ItemType.dish, municipality_id, query)


@app.get("/restaurants", response_model=list[Restaurant])
async def restaurants(
    municipality_id: int | None = None,
    kind: str = "all",
    q: str = "",
    price: PriceBucket = PriceBucket.all,
    sort: SortKey = SortKey.rating,
    include_description: bool = True,
    include_cuisines: bool = True,
    include_municipality: bool = True,
    services: Services = Depends(get_services),
) -> list[CuratedItem]:
    query = ListQuery(
        q=q,
        fields=SearchFields(
            include_description=include_description,
            include_ingredients=include_cuisines,
            include_municipality=include_municipality,
        ),
        category=kind,
        price=price,
        sort=sort,
    )
    return await _list_view(services, ItemType.restaurant, municipality_id, query)


@app.get("/municipalities/{municipality_id}/featured")
async def featured(
    municipality_id: int, services: Services = Depends(get_services),
) -> dict:
    dish_rows = await services.cache.get_or_fetch(
        ScopeFilters(item_type=ItemType.dish, municipality_id=municipality_id),
        services.gateway.fetch_items,
    )
    restaurant_rows = await services.cache.get_or_fetch(
        ScopeFilters(item_type=ItemType.restaurant, municipality_id=municipality_id),
        services.gateway.fetch_items,
    )
    panels: dict[str, list] = {}
    for category in DishCategory:
        in_scope = [d for d in dish_rows if d.category_key == category.value]
        panels[category.value] = [d.model_dump(mode="json") for d in ranked_slots(in_scope)]
    panels["restaurants"] = [r.model_dump(mode="json") for r in ranked_slots(restaurant_rows)]
    return {"municipality_id": municipality_id, "panels": panels}


@app.get("/dishes/{dish_id}/restaurants", response_model=list[Restaurant])
async def dish_restaurants(
    dish_id: int, services: Services = Depends(get_services),
) -> list[Restaurant]:
    return await services.links.list_associated_restaurants(dish_id)


@app.get("/restaurants/{restaurant_id}/dishes", response_model=list[Dish])
async def restaurant_dishes(
    restaurant_id: int, services: Services = Depends(get_services),
) -> list[Dish]:
    return await services.links.list_associated_dishes(restaurant_id)


# ── Curator endpoints ────────────────────────────────────────────────────


@app.put("/dishes/{dish_id}/rank", response_model=RankOutcome)
async def set_dish_rank(
    dish_id: int, body: RankRequest, services: Services = Depends(get_services),
) -> RankOutcome:
    return await _set_rank(services, ItemType.dish, dish_id, body)


@app.put("/restaurants/{restaurant_id}/rank", response_model=RankOutcome)
async def set_restaurant_rank(
    restaurant_id: int, body: RankRequest, services: Services = Depends(get_services),
) -> RankOutcome:
    return await _set_rank(services, ItemType.restaurant, restaurant_id, body)


@app.post("/links", response_model=DishRestaurantLink)
async def link(
    body: LinkRequest, services: Services = Depends(get_services),
) -> DishRestaurantLink:
    return await services.links.link(body.dish_id, body.restaurant_id, body.metadata())


@app.delete("/links")
async def unlink(
    dish_id: int, restaurant_id: int, services: Services = Depends(get_services),
) -> dict:
    await services.links.unlink(dish_id, restaurant_id)
    return {"status": "unlinked", "dish_id": dish_id, "restaurant_id": restaurant_id}


@app.post("/links/bulk", response_model=BulkLinkResult)
async def bulk_link(
    body: BulkLinkRequest, services: Services = Depends(get_services),
) -> BulkLinkResult:
    return await services.links.bulk_link(body.dish_ids, body.restaurant_ids, body.metadata())


@app.get("/curation/summary")
async def curation_summary(services: Services = Depends(get_services)) -> dict:
    gateway = services.gateway
    return compute_summary(
        await gateway.fetch_municipalities(),
        await gateway.fetch_items(ScopeFilters(item_type=ItemType.dish)),
        await gateway.fetch_items(ScopeFilters(item_type=ItemType.restaurant)),
    )


@app.get("/cache/stats")
def cache_stats(services: Services = Depends(get_services)) -> dict:
    return services.cache.stats()
