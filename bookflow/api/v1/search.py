from fastapi import APIRouter, Depends, HTTPException, Request

from bookflow.api.v1.schemas import (
    CategorySuggestionSchema,
    FavoriteToggleSchema,
    PriceRangeSuggestionSchema,
    ProviderSchema,
    SearchResponseSchema,
    SearchStatsSchema,
)
from bookflow.application.exceptions import NetworkError
from bookflow.application.ports.auth import AuthPort
from bookflow.application.use_cases.provider_search import ProviderSearchUseCase
from bookflow.application.utils.search_params import decode_search_params, encode_search_params
from bookflow.wiring.dependencies import get_auth, get_provider_search_use_case

router = APIRouter()

ANONYMOUS_OWNER = "anonymous"


def _owner_id(auth: AuthPort) -> str:
    user = auth.current_user
    return user.id if user else ANONYMOUS_OWNER


@router.get("/providers/search", response_model=SearchResponseSchema)
async def search_providers(
    request: Request,
    uc: ProviderSearchUseCase = Depends(get_provider_search_use_case),
    auth: AuthPort = Depends(get_auth),
):
    """Query params follow the search form: query, location, categories, priceMin, priceMax, availability, sortBy."""
    query, filters = decode_search_params(request.query_params)
    try:
        result = await uc.search(_owner_id(auth), query, filters)
    except NetworkError as e:
        raise HTTPException(status_code=502, detail={"message": e.message, "code": e.code})

    return SearchResponseSchema(
        providers=[ProviderSchema.model_validate(p) for p in result.providers],
        stats=SearchStatsSchema.model_validate(result.stats),
        category_suggestions=[CategorySuggestionSchema.model_validate(c) for c in result.category_suggestions],
        price_range=PriceRangeSuggestionSchema.model_validate(result.price_range) if result.price_range else None,
        params=encode_search_params(query, filters),
    )


@router.get("/providers/{provider_id}", response_model=ProviderSchema)
async def get_provider(
    provider_id: str,
    uc: ProviderSearchUseCase = Depends(get_provider_search_use_case),
    auth: AuthPort = Depends(get_auth),
):
    try:
        provider = await uc.get_provider(_owner_id(auth), provider_id)
    except NetworkError as e:
        raise HTTPException(status_code=502, detail={"message": e.message, "code": e.code})
    if provider is None:
        raise HTTPException(status_code=404, detail=f"Provider '{provider_id}' not found")
    return ProviderSchema.model_validate(provider)


@router.post("/providers/{provider_id}/favorite", response_model=FavoriteToggleSchema)
def toggle_favorite(
    provider_id: str,
    uc: ProviderSearchUseCase = Depends(get_provider_search_use_case),
    auth: AuthPort = Depends(get_auth),
):
    is_favorite = uc.toggle_favorite(_owner_id(auth), provider_id)
    return FavoriteToggleSchema(provider_id=provider_id, is_favorite=is_favorite)
