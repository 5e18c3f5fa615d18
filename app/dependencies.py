from typing import Annotated

from fastapi import Depends, Request

from app.services.search import SearchService
from app.services.static_data import StaticDataEnricher
from app.services.travel_api import TravelApiService


def get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service


def get_enricher(request: Request) -> StaticDataEnricher:
    return request.app.state.enricher


def get_travel_api(request: Request) -> TravelApiService:
    return request.app.state.travel_api


SearchDep = Annotated[SearchService, Depends(get_search_service)]
EnricherDep = Annotated[StaticDataEnricher, Depends(get_enricher)]
TravelApiDep = Annotated[TravelApiService, Depends(get_travel_api)]
