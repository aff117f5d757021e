"""rk_construction REST API — /construction/* (derive + seven pipeline stages)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.rk_chain.domain.client import ChainClient
from src.rk_common.chain_params import ChainParameters
from src.rk_common.deps import get_chain_client, get_mode, get_params
from src.rk_common.enums import Mode
from src.rk_construction.application.schemas import (
    ConstructionCombineRequest,
    ConstructionCombineResponse,
    ConstructionDeriveRequest,
    ConstructionDeriveResponse,
    ConstructionHashRequest,
    ConstructionMetadataRequest,
    ConstructionMetadataResponse,
    ConstructionParseRequest,
    ConstructionParseResponse,
    ConstructionPayloadsRequest,
    ConstructionPayloadsResponse,
    ConstructionPreprocessRequest,
    ConstructionPreprocessResponse,
    ConstructionSubmitRequest,
    TransactionIdentifierResponse,
)
from src.rk_construction.application.service import ConstructionApplicationService

router = APIRouter(prefix="/construction", tags=["construction"])


def get_construction_service(
    params: Annotated[ChainParameters, Depends(get_params)],
    mode: Annotated[Mode, Depends(get_mode)],
    client: Annotated[ChainClient | None, Depends(get_chain_client)],
) -> ConstructionApplicationService:
    return ConstructionApplicationService(params, mode, client)


Service = Annotated[ConstructionApplicationService, Depends(get_construction_service)]


@router.post("/derive", response_model=ConstructionDeriveResponse, response_model_exclude_none=True)
async def derive(body: ConstructionDeriveRequest, service: Service) -> ConstructionDeriveResponse:
    return await service.derive(body)


@router.post("/preprocess", response_model=ConstructionPreprocessResponse)
async def preprocess(
    body: ConstructionPreprocessRequest, service: Service
) -> ConstructionPreprocessResponse:
    return await service.preprocess(body)


@router.post(
    "/metadata", response_model=ConstructionMetadataResponse, response_model_exclude_none=True
)
async def metadata(
    body: ConstructionMetadataRequest, service: Service
) -> ConstructionMetadataResponse:
    return await service.metadata(body)


@router.post(
    "/payloads", response_model=ConstructionPayloadsResponse, response_model_exclude_none=True
)
async def payloads(
    body: ConstructionPayloadsRequest, service: Service
) -> ConstructionPayloadsResponse:
    return await service.payloads(body)


@router.post("/parse", response_model=ConstructionParseResponse, response_model_exclude_none=True)
async def parse(body: ConstructionParseRequest, service: Service) -> ConstructionParseResponse:
    return await service.parse(body)


@router.post("/combine", response_model=ConstructionCombineResponse)
async def combine(
    body: ConstructionCombineRequest, service: Service
) -> ConstructionCombineResponse:
    return await service.combine(body)


@router.post("/hash", response_model=TransactionIdentifierResponse, response_model_exclude_none=True)
async def hash_(body: ConstructionHashRequest, service: Service) -> TransactionIdentifierResponse:
    return await service.hash(body)


@router.post(
    "/submit", response_model=TransactionIdentifierResponse, response_model_exclude_none=True
)
async def submit(
    body: ConstructionSubmitRequest, service: Service
) -> TransactionIdentifierResponse:
    return await service.submit(body)
