from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Solana RPC
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    rpc_commitment: str = "confirmed"
    token_program_id: str = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"  # SPL Token

    # Jupiter (api.jup.ag gateway, x-api-key optional on the free tier)
    jupiter_api_key: str = ""
    jupiter_price_url: str = "https://api.jup.ag/price/v2"
    jupiter_quote_url: str = "https://api.jup.ag/swap/v1/quote"
    jupiter_swap_url: str = "https://api.jup.ag/swap/v1/swap"
    jupiter_as_legacy_transaction: bool = True  # v0 + lookup tables can't be merged

    # Sweep policy
    stablecoin_mint: str = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"  # USDC
    stablecoin_symbol: str = "USDC"
    dust_threshold_usd: float = 5.0
    dust_threshold_inclusive: bool = True  # value <= threshold (False: value < threshold)
    slippage_bps: int = 50
    enable_view_action: bool = True

    # Send the action header set on price/quote/swap calls too
    forward_action_headers: bool = False

    # Outbound retry (429 only)
    retry_max_attempts: int = 5
    retry_base_delay_sec: float = 1.0
    http_timeout_sec: float = 15.0

    # Action metadata
    action_icon_url: str = "https://raw.githubusercontent.com/your-repo/dust-sweeper-icon.png"
    action_title: str = "Dust Token Sweeper"
    action_label: str = "Sweep Dust"
    action_version: str = "2.1.3"
    action_blockchain_ids: str = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"  # mainnet-beta

    # Inbound rate limit (slowapi syntax)
    action_rate_limit: str = "60/minute"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    json_logs: bool = False
    debug: bool = False


settings = Settings()
