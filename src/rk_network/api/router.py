"""rk_network REST API — /network/list, /network/options, /network/status, /call."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.rk_chain.domain.client import ChainClient
from src.rk_common.chain_params import ChainParameters
from src.rk_common.deps import get_chain_client, get_mode, get_params
from src.rk_common.enums import Mode
from src.rk_common.schemas import MetadataRequest, NetworkRequest
from src.rk_network.application.schemas import (
    CallRequest,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
)
from src.rk_network.application.service import NetworkApplicationService

router = APIRouter(tags=["network"])


def get_network_service(
    params: Annotated[ChainParameters, Depends(get_params)],
    mode: Annotated[Mode, Depends(get_mode)],
    client: Annotated[ChainClient | None, Depends(get_chain_client)],
) -> NetworkApplicationService:
    return NetworkApplicationService(params, mode, client)


Service = Annotated[NetworkApplicationService, Depends(get_network_service)]


@router.post("/network/list", response_model=NetworkListResponse)
async def network_list(body: MetadataRequest, service: Service) -> NetworkListResponse:
    return await service.list(body)


@router.post(
    "/network/options", response_model=NetworkOptionsResponse, response_model_exclude_none=True
)
async def network_options(body: NetworkRequest, service: Service) -> NetworkOptionsResponse:
    return await service.options(body)


@router.post(
    "/network/status", response_model=NetworkStatusResponse, response_model_exclude_none=True
)
async def network_status(body: NetworkRequest, service: Service) -> NetworkStatusResponse:
    return await service.status(body)


@router.post("/call")
async def call(body: CallRequest, service: Service) -> None:
    await service.call(body)
