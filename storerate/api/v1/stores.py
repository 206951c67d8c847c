"""Store listing, CRUD and owner feedback endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from storerate.core.deps import AdminUser, CurrentUser, DBSession, StoreOwnerOrAdminUser
from storerate.core.permissions import ensure_store_owner_or_admin
from storerate.core.validation import validate_store
from storerate.schemas.common import ApiResponse, Pagination, ok
from storerate.schemas.stats import StoreOverview
from storerate.schemas.store import (
    AdminStoreListData,
    StoreCreate,
    StoreData,
    StoreDetailData,
    StoreListData,
    StoreRatingsPage,
    StoreResponse,
    StoreUpdate,
)
from storerate.services.listing import PageParams, SortOrder
from storerate.services.statistics_service import StatisticsService
from storerate.services.store_service import StoreFilters, StoreService

router = APIRouter()

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


# === Listings ===


@router.get(
    "",
    response_model=ApiResponse[StoreListData],
    summary="List stores",
    description="Paginated stores with average rating and the caller's own rating.",
)
async def list_stores(
    user: CurrentUser,
    db: DBSession,
    name: str | None = None,
    address: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ApiResponse[StoreListData]:
    stores, total = await StoreService(db).list_stores(
        user.id,
        StoreFilters(name=name, address=address),
        PageParams(page=page, limit=limit),
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.ASC),
    )
    return ok(
        "Stores retrieved successfully",
        StoreListData(
            stores=stores,
            pagination=Pagination.build(page=page, limit=limit, total=total),
        ),
    )


@router.get(
    "/admin",
    response_model=ApiResponse[AdminStoreListData],
    summary="List stores (admin)",
    description="Paginated stores with average rating and owner contact details.",
)
async def list_stores_for_admin(
    _admin: AdminUser,
    db: DBSession,
    name: str | None = None,
    email: str | None = None,
    address: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ApiResponse[AdminStoreListData]:
    stores, total = await StoreService(db).list_stores_for_admin(
        StoreFilters(name=name, email=email, address=address),
        PageParams(page=page, limit=limit),
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.ASC),
    )
    return ok(
        "Stores retrieved successfully",
        AdminStoreListData(
            stores=stores,
            pagination=Pagination.build(page=page, limit=limit, total=total),
        ),
    )


@router.get(
    "/stats",
    response_model=ApiResponse[StoreOverview],
    summary="Store statistics",
    description="Store counts, rating totals, star distribution and top stores.",
)
async def store_stats(_admin: AdminUser, db: DBSession) -> ApiResponse[StoreOverview]:
    overview = await StatisticsService(db).store_overview()
    return ok("Store statistics retrieved successfully", overview)


# === CRUD ===


@router.post(
    "",
    response_model=ApiResponse[StoreData],
    status_code=status.HTTP_201_CREATED,
    summary="Create store",
    description="Create a store and promote its owner to store_owner.",
)
async def create_store(
    data: StoreCreate,
    _admin: AdminUser,
    db: DBSession,
) -> ApiResponse[StoreData]:
    validate_store(data.name, data.email, data.address, data.owner_id, data.password)

    store = await StoreService(db).create_store(
        name=data.name,
        email=data.email,
        address=data.address,
        owner_id=data.owner_id,
        password=data.password or None,
    )
    return ok("Store created successfully", StoreData(store=StoreResponse.model_validate(store)))


@router.get(
    "/{store_id}",
    response_model=ApiResponse[StoreDetailData],
    summary="Get store",
)
async def get_store(
    store_id: UUID,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[StoreDetailData]:
    detail = await StoreService(db).get_store_detail(store_id, user.id)
    return ok("Store retrieved successfully", StoreDetailData(store=detail))


@router.get(
    "/{store_id}/ratings",
    response_model=ApiResponse[StoreRatingsPage],
    summary="Store ratings",
    description="Paginated ratings of one store, visible to its owner and to admins.",
)
async def get_store_ratings(
    store_id: UUID,
    user: StoreOwnerOrAdminUser,
    db: DBSession,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ApiResponse[StoreRatingsPage]:
    await ensure_store_owner_or_admin(db, user, store_id)

    summary, ratings, total = await StoreService(db).get_store_ratings(
        store_id,
        PageParams(page=page, limit=limit),
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.DESC),
    )
    return ok(
        "Store ratings retrieved successfully",
        StoreRatingsPage(
            store=summary,
            ratings=ratings,
            pagination=Pagination.build(page=page, limit=limit, total=total),
        ),
    )


@router.put(
    "/{store_id}",
    response_model=ApiResponse[StoreData],
    summary="Update store",
)
async def update_store(
    store_id: UUID,
    data: StoreUpdate,
    _admin: AdminUser,
    db: DBSession,
) -> ApiResponse[StoreData]:
    validate_store(data.name, data.email, data.address, require_owner=False)

    store = await StoreService(db).update_store(
        store_id, name=data.name, email=data.email, address=data.address
    )
    return ok("Store updated successfully", StoreData(store=StoreResponse.model_validate(store)))


@router.delete(
    "/{store_id}",
    response_model=ApiResponse[None],
    summary="Delete store",
    description="Delete a store with its ratings; a storeless owner reverts to normal_user.",
)
async def delete_store(
    store_id: UUID,
    _admin: AdminUser,
    db: DBSession,
) -> ApiResponse[None]:
    await StoreService(db).delete_store(store_id)
    return ok("Store deleted successfully")
