"""rk_account REST API — /account/balance and /account/coins."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.rk_account.application.schemas import (
    AccountBalanceRequest,
    AccountBalanceResponse,
    AccountCoinsRequest,
)
from src.rk_account.application.service import AccountApplicationService
from src.rk_chain.domain.client import ChainClient
from src.rk_common.chain_params import ChainParameters
from src.rk_common.deps import get_chain_client, get_mode, get_params
from src.rk_common.enums import Mode

router = APIRouter(prefix="/account", tags=["account"])


def get_account_service(
    params: Annotated[ChainParameters, Depends(get_params)],
    mode: Annotated[Mode, Depends(get_mode)],
    client: Annotated[ChainClient | None, Depends(get_chain_client)],
) -> AccountApplicationService:
    return AccountApplicationService(params, mode, client)


Service = Annotated[AccountApplicationService, Depends(get_account_service)]


@router.post("/balance", response_model=AccountBalanceResponse, response_model_exclude_none=True)
async def balance(body: AccountBalanceRequest, service: Service) -> AccountBalanceResponse:
    return await service.balance(body)


@router.post("/coins")
async def coins(body: AccountCoinsRequest, service: Service) -> None:
    await service.coins(body)
