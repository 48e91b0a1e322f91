from pathlib import Path
from typing import Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from treasury_executor.core.bridge.layouts import ETH_LAYOUT, TAC_LAYOUT, TreasuryLayout
from treasury_executor.core.bridge.models import DEFAULT_STORAGE_MARGIN, RouteConfig
from treasury_executor.core.errors import ConfigurationError


BASE_DIR = Path(__file__).resolve().parents[1]


def parse_amount(value: str, label: str) -> int:
    """Parse a decimal-string nanounit amount."""
    text = (value or "").strip()
    if not text.isdigit():
        raise ConfigurationError(f"{label} must be a non-negative decimal integer, got {value!r}")
    return int(text)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Network
    lite_servers_config: str = Field(
        default="",
        description="Path or http(s) URL of the lite-server network config (global.config.json)",
    )
    trust_level: int = Field(default=2, ge=0, le=2, description="Lite-server proof trust level")
    rpc_timeout_seconds: float = Field(default=10.0, gt=0, description="Per-request lite-server timeout")
    rpc_max_retries: int = Field(default=5, ge=1, description="Attempts per lite-server request")

    # Executor wallet
    wallet_mnemonic: str = Field(default="", description="Space separated wallet mnemonic")
    wallet_version: str = Field(default="v3r2", description="Wallet contract version (v3r2, v4r2)")
    send_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="How long to wait for the treasury transaction after sending",
    )
    send_poll_interval_seconds: float = Field(default=3.0, gt=0, description="Transaction polling interval")

    # TON -> TAC route
    tac_usdt_treasury_address: str = Field(default="", description="TAC USDT treasury contract")
    usdt_tac_wallet_address: str = Field(default="", description="USDT jetton wallet feeding the TAC treasury")
    tac_min_bridge_amount: Optional[str] = Field(default=None, description="Override of min_bridge_amount")
    tac_bridge_op_code: Optional[int] = Field(default=None, description="Override of the TAC bridge op code")

    # TON -> ETH route
    eth_usdt_treasury_address: str = Field(default="", description="ETH USDT treasury contract")
    usdt_eth_wallet_address: str = Field(default="", description="USDT jetton wallet feeding the ETH treasury")
    eth_min_bridge_amount: Optional[str] = Field(default=None, description="Override of min_bridge_amount")
    eth_bridge_op_code: Optional[int] = Field(default=None, description="Override of the ETH bridge op code")

    # Bridge policy
    min_bridge_amount: str = Field(
        default="100000000",
        description="Minimum jetton balance (in jetton nanounits) worth bridging",
    )
    storage_margin: int = Field(
        default=DEFAULT_STORAGE_MARGIN,
        ge=0,
        description="Nanoton added on balance-adjusted routes for treasury storage rent",
    )
    fee_refresh_interval_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Re-read treasury fees when older than this; 0 reads them once at startup",
    )

    # Scheduler
    task_delay: int = Field(default=60, ge=1, description="Polling interval in minutes")
    exit_on_initial_failure: bool = Field(
        default=True,
        description="Terminate when any route fails during the startup run",
    )

    @field_validator("tac_bridge_op_code", "eth_bridge_op_code", mode="before")
    @classmethod
    def _parse_op_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            return int(value, 0)
        return value

    @property
    def interval_seconds(self) -> float:
        return float(self.task_delay * 60)

    def route_configs(self) -> List[RouteConfig]:
        """Build the enabled routes.

        A route is enabled when its treasury address is set.
        """
        routes = [
            route
            for route in (
                self._route(
                    "ton_tac",
                    TAC_LAYOUT,
                    self.tac_usdt_treasury_address,
                    self.usdt_tac_wallet_address,
                    self.tac_min_bridge_amount,
                    self.tac_bridge_op_code,
                ),
                self._route(
                    "ton_eth",
                    ETH_LAYOUT,
                    self.eth_usdt_treasury_address,
                    self.usdt_eth_wallet_address,
                    self.eth_min_bridge_amount,
                    self.eth_bridge_op_code,
                ),
            )
            if route is not None
        ]
        if not routes:
            raise ConfigurationError("no bridge routes configured")
        return routes

    def _route(
        self,
        name: str,
        layout: TreasuryLayout,
        treasury_address: str,
        wallet_address: str,
        min_bridge_amount: Optional[str],
        op_code: Optional[int],
    ) -> Optional[RouteConfig]:
        if not treasury_address:
            return None
        if not wallet_address:
            raise ConfigurationError(f"{name}: treasury address is set but jetton wallet address is not")

        try:
            return RouteConfig(
                name=name,
                variant=layout.variant,
                treasury_address=treasury_address,
                jetton_wallet_address=wallet_address,
                min_bridge_amount=parse_amount(
                    min_bridge_amount or self.min_bridge_amount,
                    f"{name} min bridge amount",
                ),
                value_strategy=layout.default_strategy,
                storage_margin=self.storage_margin,
                op_code=op_code,
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc


# Global settings instance
settings = Settings()
