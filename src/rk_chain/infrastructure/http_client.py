"""HttpChainClient — ChainClient over the node's REST (LCD) and Tendermint RPC.

REST reads are pinned to a height with the x-cosmos-block-height header.
Tendermint RPC is called with GET + query parameters (URI form).

Every failure is raised as ChainClientError carrying the node's own text;
nothing is retried here.
"""

import asyncio
import base64
import logging
import re
from typing import Any

import httpx

from src.rk_account.domain.models import (
    Account,
    BaseAccount,
    VestingAccount,
    VestingKind,
    VestingPeriod,
    VestingSchedule,
)
from src.rk_chain.domain.models import (
    Block,
    BlockHeader,
    BlockResults,
    BlockUnavailableError,
    BroadcastResult,
    ChainClientError,
    Delegation,
    Event,
    NodeStatus,
    NoBlockResultsError,
    Peer,
    TxResult,
    UnbondingDelegation,
    UnknownAddressError,
)
from src.rk_common.coins import Coin, Coins
from src.rk_common.datetime_utils import from_unix_seconds, parse_rfc3339

logger = logging.getLogger(__name__)

HEIGHT_HEADER = "x-cosmos-block-height"
_PAGE_LIMIT = "1000"

_NO_RESULTS_RE = re.compile(r"could not find results for height #(\d+)")
_UNKNOWN_ADDRESS_RE = re.compile(r"not found|unknown address", re.IGNORECASE)
_BLOCK_UNAVAILABLE_RE = re.compile(
    r"must be less than or equal to the current blockchain height"
    r"|is not available, lowest height is"
    r"|block not found",
    re.IGNORECASE,
)
_VESTING_TYPES = (
    (VestingKind.CONTINUOUS, "ContinuousVestingAccount"),
    (VestingKind.DELAYED, "DelayedVestingAccount"),
    (VestingKind.PERIODIC, "PeriodicVestingAccount"),
)


def _coins(items: list[dict[str, Any]] | None) -> Coins:
    return Coins.from_dicts(items or [])


def _events(items: list[dict[str, Any]] | None) -> tuple[Event, ...]:
    return tuple(
        Event(
            type=e["type"],
            attributes=tuple(
                (a.get("key") or "", a.get("value") or "") for a in e.get("attributes") or []
            ),
        )
        for e in items or []
    )


def _vesting_kind(data: dict[str, Any]) -> VestingKind:
    type_url = data.get("@type", "")
    for kind, suffix in _VESTING_TYPES:
        if type_url.endswith(suffix):
            return kind
    if "vesting_periods" in data:
        return VestingKind.PERIODIC
    return VestingKind.CONTINUOUS if "start_time" in data else VestingKind.DELAYED


def _parse_account(data: dict[str, Any], coins: Coins) -> Account:
    """Map an auth-module account JSON object onto the Account union."""
    bva = data.get("base_vesting_account")
    if bva is None:
        base = data.get("base_account", data)
        return BaseAccount(
            address=base["address"],
            coins=coins,
            sequence=int(base.get("sequence") or 0),
            account_number=int(base.get("account_number") or 0),
        )

    base = bva["base_account"]
    kind = _vesting_kind(data)
    end_time = from_unix_seconds(int(bva["end_time"]))
    # delayed vesting accounts carry no start time
    start_time = from_unix_seconds(int(data["start_time"])) if "start_time" in data else end_time
    schedule = VestingSchedule(
        kind=kind,
        original_vesting=_coins(bva.get("original_vesting")),
        delegated_free=_coins(bva.get("delegated_free")),
        delegated_vesting=_coins(bva.get("delegated_vesting")),
        start_time=start_time,
        end_time=end_time,
        periods=tuple(
            VestingPeriod(length_seconds=int(p["length"]), amount=_coins(p.get("amount")))
            for p in data.get("vesting_periods") or []
        ),
    )
    return VestingAccount(
        address=base["address"],
        schedule=schedule,
        coins=coins,
        sequence=int(base.get("sequence") or 0),
        account_number=int(base.get("account_number") or 0),
    )


def _parse_header(block_id: dict[str, Any], block: dict[str, Any]) -> Block:
    header = block["header"]
    return Block(
        hash=block_id["hash"].upper(),
        header=BlockHeader(
            height=int(header["height"]),
            time=parse_rfc3339(header["time"]),
            last_block_hash=(header.get("last_block_id") or {}).get("hash", "").upper(),
        ),
        txs=tuple(base64.b64decode(tx) for tx in (block.get("data") or {}).get("txs") or []),
    )


class HttpChainClient:
    """Async node client; one instance is shared for the app's lifetime."""

    def __init__(
        self,
        rpc_url: str,
        api_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rpc = httpx.AsyncClient(base_url=rpc_url.rstrip("/"), timeout=timeout, transport=transport)
        self._api = httpx.AsyncClient(base_url=api_url.rstrip("/"), timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._rpc.aclose()
        await self._api.aclose()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _rest(
        self,
        method: str,
        path: str,
        height: int | None = None,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {HEIGHT_HEADER: str(height)} if height is not None else None
        try:
            resp = await self._api.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("node REST %s %s failed: %s", method, path, exc)
            raise ChainClientError(f"{method} {path}: {exc}") from exc
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            message = message or resp.text or f"HTTP {resp.status_code}"
            logger.warning("node REST %s %s -> %d: %s", method, path, resp.status_code, message)
            if resp.status_code == 404 or _UNKNOWN_ADDRESS_RE.search(message):
                raise UnknownAddressError(message)
            raise ChainClientError(message)
        if not isinstance(body, dict):
            raise ChainClientError(f"{path}: unexpected response body")
        return body

    async def _rpc_call(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            resp = await self._rpc.get(path, params=params)
            body = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("node RPC %s failed: %s", path, exc)
            raise ChainClientError(f"{path}: {exc}") from exc
        except ValueError as exc:
            raise ChainClientError(f"{path}: invalid JSON response") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = error.get("data") or error.get("message") or str(error)
            logger.warning("node RPC %s error: %s", path, message)
            match = _NO_RESULTS_RE.search(message)
            if match:
                raise NoBlockResultsError(int(match.group(1)), message)
            if _BLOCK_UNAVAILABLE_RE.search(message):
                raise BlockUnavailableError(message)
            raise ChainClientError(message)
        if resp.status_code >= 400 or not isinstance(body, dict) or "result" not in body:
            raise ChainClientError(f"{path}: HTTP {resp.status_code}")
        return body["result"]

    # ------------------------------------------------------------------
    # Accounts and staking
    # ------------------------------------------------------------------

    async def get_account(self, address: str, height: int | None) -> Account:
        account_body, balance_body = await asyncio.gather(
            self._rest("GET", f"/cosmos/auth/v1beta1/accounts/{address}", height),
            self._rest(
                "GET",
                f"/cosmos/bank/v1beta1/balances/{address}",
                height,
                params={"pagination.limit": _PAGE_LIMIT},
            ),
        )
        try:
            return _parse_account(account_body["account"], _coins(balance_body.get("balances")))
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected account response: {exc}") from exc

    async def get_delegations(self, address: str, height: int | None) -> list[Delegation]:
        body = await self._rest(
            "GET",
            f"/cosmos/staking/v1beta1/delegations/{address}",
            height,
            params={"pagination.limit": _PAGE_LIMIT},
        )
        try:
            return [
                Delegation(
                    validator_address=r["delegation"]["validator_address"],
                    balance=Coin(denom=r["balance"]["denom"], amount=int(r["balance"]["amount"])),
                )
                for r in body.get("delegation_responses") or []
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected delegations response: {exc}") from exc

    async def get_unbonding_delegations(
        self, address: str, height: int | None
    ) -> list[UnbondingDelegation]:
        body = await self._rest(
            "GET",
            f"/cosmos/staking/v1beta1/delegators/{address}/unbonding_delegations",
            height,
            params={"pagination.limit": _PAGE_LIMIT},
        )
        try:
            return [
                UnbondingDelegation(
                    validator_address=r["validator_address"],
                    entry_balances=tuple(int(e["balance"]) for e in r.get("entries") or []),
                )
                for r in body.get("unbonding_responses") or []
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected unbonding response: {exc}") from exc

    async def simulate(self, tx_bytes: bytes) -> int:
        body = await self._rest(
            "POST",
            "/cosmos/tx/v1beta1/simulate",
            json={"tx_bytes": base64.b64encode(tx_bytes).decode()},
        )
        try:
            return int(body["gas_info"]["gas_used"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected simulate response: {exc}") from exc

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def get_block(
        self, height: int | None = None, block_hash: str | None = None
    ) -> Block:
        if block_hash is not None:
            result = await self._rpc_call("/block_by_hash", {"hash": "0x" + block_hash})
        elif height is not None:
            result = await self._rpc_call("/block", {"height": str(height)})
        else:
            result = await self._rpc_call("/block")
        if not result.get("block"):
            raise BlockUnavailableError(f"block not found: {block_hash or height}")
        try:
            return _parse_header(result["block_id"], result["block"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected block response: {exc}") from exc

    async def get_block_results(self, height: int | None) -> BlockResults:
        params = {"height": str(height)} if height is not None else None
        result = await self._rpc_call("/block_results", params)
        try:
            return BlockResults(
                height=int(result["height"]),
                txs_results=tuple(
                    TxResult(
                        code=int(r.get("code") or 0),
                        codespace=r.get("codespace") or "",
                        log=r.get("log") or "",
                        events=_events(r.get("events")),
                        gas_wanted=int(r.get("gas_wanted") or 0),
                        gas_used=int(r.get("gas_used") or 0),
                    )
                    for r in result.get("txs_results") or []
                ),
                begin_block_events=_events(result.get("begin_block_events")),
                end_block_events=_events(result.get("end_block_events")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected block results response: {exc}") from exc

    # ------------------------------------------------------------------
    # Broadcast and node status
    # ------------------------------------------------------------------

    async def broadcast(self, tx_bytes: bytes) -> BroadcastResult:
        result = await self._rpc_call("/broadcast_tx_sync", {"tx": "0x" + tx_bytes.hex()})
        return BroadcastResult(
            code=int(result.get("code") or 0),
            log=result.get("log") or "",
            hash=(result.get("hash") or "").upper(),
        )

    async def status(self) -> NodeStatus:
        status, net_info = await asyncio.gather(
            self._rpc_call("/status"), self._rpc_call("/net_info")
        )
        try:
            sync = status["sync_info"]
            peers = tuple(
                Peer(
                    node_id=p["node_info"]["id"],
                    metadata={
                        "moniker": p["node_info"].get("moniker", ""),
                        "network": p["node_info"].get("network", ""),
                        "remote_ip": p.get("remote_ip", ""),
                    },
                )
                for p in net_info.get("peers") or []
            )
            return NodeStatus(
                latest_height=int(sync["latest_block_height"]),
                earliest_height=int(sync["earliest_block_height"]),
                earliest_hash=(sync.get("earliest_block_hash") or "").upper(),
                catching_up=bool(sync.get("catching_up")),
                peers=peers,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainClientError(f"unexpected status response: {exc}") from exc
