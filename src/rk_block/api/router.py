"""rk_block REST API — /block, /block/transaction, /mempool, /mempool/transaction."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.rk_block.application.schemas import (
    BlockRequest,
    BlockResponse,
    BlockTransactionRequest,
    BlockTransactionResponse,
    MempoolTransactionRequest,
)
from src.rk_block.application.service import BlockApplicationService
from src.rk_chain.domain.client import ChainClient
from src.rk_common.chain_params import ChainParameters
from src.rk_common.deps import get_chain_client, get_mode, get_params
from src.rk_common.enums import Mode
from src.rk_common.schemas import NetworkRequest

router = APIRouter(tags=["block"])


def get_block_service(
    params: Annotated[ChainParameters, Depends(get_params)],
    mode: Annotated[Mode, Depends(get_mode)],
    client: Annotated[ChainClient | None, Depends(get_chain_client)],
) -> BlockApplicationService:
    return BlockApplicationService(params, mode, client)


Service = Annotated[BlockApplicationService, Depends(get_block_service)]


@router.post("/block", response_model=BlockResponse, response_model_exclude_none=True)
async def block(body: BlockRequest, service: Service) -> BlockResponse:
    return await service.block(body)


@router.post(
    "/block/transaction",
    response_model=BlockTransactionResponse,
    response_model_exclude_none=True,
)
async def block_transaction(
    body: BlockTransactionRequest, service: Service
) -> BlockTransactionResponse:
    return await service.block_transaction(body)


@router.post("/mempool")
async def mempool(body: NetworkRequest, service: Service) -> None:
    await service.mempool(body)


@router.post("/mempool/transaction")
async def mempool_transaction(body: MempoolTransactionRequest, service: Service) -> None:
    await service.mempool_transaction(body)
