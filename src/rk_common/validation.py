"""Request guards shared by the application services.

Call order inside a service method: require_online, then check_network,
then everything else.
"""

from src.rk_common.chain_params import ChainParameters
from src.rk_common.enums import Mode
from src.rk_common.errors import InvalidAddressError, InvalidNetworkError, UnavailableOfflineError
from src.rk_common.schemas import NetworkIdentifier


def require_online(mode: Mode) -> None:
    if mode != Mode.ONLINE:
        raise UnavailableOfflineError()


def check_network(params: ChainParameters, network_identifier: NetworkIdentifier) -> None:
    if (
        network_identifier.blockchain != params.blockchain
        or network_identifier.network != params.network
    ):
        raise InvalidNetworkError(
            f"{network_identifier.blockchain}/{network_identifier.network}"
        )


def check_address(params: ChainParameters, address: str | None) -> str:
    if not params.is_valid_address(address):
        raise InvalidAddressError(address)
    return address  # type: ignore[return-value]
