"""FastAPI dependencies for the request-scoped collaborators.

main.py stores the chain parameters, mode and (online only) chain client on
app.state; tests swap any of them through app.dependency_overrides.

Usage in a router:
    from src.rk_common.deps import get_chain_client, get_mode, get_params

    @router.post("/block")
    async def block(body: BlockRequest, params = Depends(get_params), ...):
        ...
"""

from fastapi import Request

from src.rk_chain.domain.client import ChainClient
from src.rk_common.chain_params import ChainParameters
from src.rk_common.enums import Mode


def get_params(request: Request) -> ChainParameters:
    return request.app.state.params


def get_mode(request: Request) -> Mode:
    return request.app.state.mode


def get_chain_client(request: Request) -> ChainClient | None:
    """None in offline mode; services reject online-only calls first."""
    return getattr(request.app.state, "chain_client", None)
