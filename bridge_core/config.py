"""Immutable system configuration and its environment loader."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigurationError, FeltRangeError
from .felt import Felt, get_selector_from_name, to_felt

ACCOUNT_REGISTRY_ADDRESS = 0x052A419FD88F53F9A29D22C3D8DB24DD9A9A01A41A483AC660D88622F83C40DB
ETH_FEE_TOKEN_ADDRESS = 0x049D36570D4E46F48E99674BD3FCC84644DDD6B96F7C741B1562B82F9E004DC7

DEFAULT_REQUEST_TIMEOUT = 30.0


class Network(Enum):
    KATANA = "http://0.0.0.0:5050/rpc"
    MADARA = "http://127.0.0.1:9944"
    SHARINGAN = "https://sharingan.madara.zone"


def resolve_endpoint(network: Union[Network, str]) -> str:
    """Turn a preset name, preset or JSON-RPC URL into an endpoint URL."""

    if isinstance(network, Network):
        return network.value
    text = network.strip()
    for preset in Network:
        if preset.name == text.upper():
            return preset.value
    if not text.startswith(("http://", "https://")):
        raise ConfigurationError(f"Unsupported network: {network!r}")
    return text


@dataclass(frozen=True)
class EntrypointSelectors:
    """Entrypoint names used against the deployed emulation contracts."""

    resolve_address: str = "get_starknet_contract_address"
    bytecode: str = "bytecode"
    storage: str = "storage"
    balance_of: str = "balanceOf"
    execute: str = "eth_call"
    send_transaction: str = "eth_send_transaction"

    def selector(self, entrypoint: str) -> Felt:
        return get_selector_from_name(getattr(self, entrypoint))


@dataclass(frozen=True)
class SystemConfiguration:
    endpoint: str
    kakarot_address: Felt
    proxy_account_class_hash: Felt
    account_registry_address: Felt = ACCOUNT_REGISTRY_ADDRESS
    fee_token_address: Felt = ETH_FEE_TOKEN_ADDRESS
    entrypoints: EntrypointSelectors = field(default_factory=EntrypointSelectors)
    max_fee: int = 0
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ConfigurationError("An RPC endpoint is required.")
        for name in (
            "kakarot_address",
            "proxy_account_class_hash",
            "account_registry_address",
            "fee_token_address",
        ):
            value = getattr(self, name)
            try:
                to_felt(value)
            except FeltRangeError as exc:
                raise ConfigurationError(f"{name} is not a valid field element.") from exc
            if value == 0:
                raise ConfigurationError(f"{name} must be non-zero.")
        if self.max_fee < 0:
            raise ConfigurationError("max_fee must be non-negative.")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive.")

    @classmethod
    def create(
        cls,
        network: Union[Network, str],
        kakarot_address: Union[int, str],
        proxy_account_class_hash: Union[int, str],
        **options: object,
    ) -> "SystemConfiguration":
        try:
            kakarot = to_felt(kakarot_address)
            proxy = to_felt(proxy_account_class_hash)
        except FeltRangeError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(
            endpoint=resolve_endpoint(network),
            kakarot_address=kakarot,
            proxy_account_class_hash=proxy,
            **options,  # type: ignore[arg-type]
        )


class BridgeSettings(BaseModel):
    """Validated settings read from the process environment."""

    model_config = ConfigDict(frozen=True)

    starknet_network: str
    kakarot_address: int
    proxy_account_class_hash: int
    account_registry_address: int = ACCOUNT_REGISTRY_ADDRESS
    fee_token_address: int = ETH_FEE_TOKEN_ADDRESS
    max_fee: int = 0
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @field_validator(
        "kakarot_address",
        "proxy_account_class_hash",
        "account_registry_address",
        "fee_token_address",
        "max_fee",
        mode="before",
    )
    @classmethod
    def _parse_felt(cls, value: object) -> object:
        if isinstance(value, str):
            return to_felt(value)
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "BridgeSettings":
        keys = {
            "starknet_network": "STARKNET_NETWORK",
            "kakarot_address": "KAKAROT_ADDRESS",
            "proxy_account_class_hash": "PROXY_ACCOUNT_CLASS_HASH",
            "account_registry_address": "ACCOUNT_REGISTRY_ADDRESS",
            "fee_token_address": "FEE_TOKEN_ADDRESS",
            "max_fee": "MAX_FEE",
            "request_timeout": "REQUEST_TIMEOUT",
        }
        values = {name: environ[key] for name, key in keys.items() if environ.get(key)}
        try:
            return cls(**values)
        except (ValidationError, FeltRangeError) as exc:
            raise ConfigurationError(f"Invalid bridge settings: {exc}") from exc

    def to_configuration(
        self, entrypoints: Optional[EntrypointSelectors] = None
    ) -> SystemConfiguration:
        return SystemConfiguration(
            endpoint=resolve_endpoint(self.starknet_network),
            kakarot_address=self.kakarot_address,
            proxy_account_class_hash=self.proxy_account_class_hash,
            account_registry_address=self.account_registry_address,
            fee_token_address=self.fee_token_address,
            entrypoints=entrypoints or EntrypointSelectors(),
            max_fee=self.max_fee,
            request_timeout=self.request_timeout,
        )
