from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Etherscan (required: no other source for contract code)
    etherscan_api_key: str = ""
    etherscan_base_url: str = "https://api.etherscan.io/v2/api"
    chain_id: int = 1  # Ethereum mainnet
    etherscan_max_rps: float = 5.0  # free plan: 5 calls/sec per key

    # Bitquery (optional, holder distribution is empty without it)
    bitquery_api_key: str = ""
    bitquery_network: str = "eth"

    # CoinGecko (demo key optional)
    coingecko_api_key: str = ""
    coingecko_platform: str = "ethereum"

    # DexScreener (no auth)
    dexscreener_chain: str = "ethereum"
    dexscreener_max_rps: float = 4.0

    # GoPlus (no auth)
    goplus_max_rps: float = 0.5

    # Timeouts
    provider_timeout_sec: float = 10.0  # per adapter
    analysis_deadline_sec: float = 20.0  # whole fan-out

    # Explanation generator (passed explicitly by the CLI, never read by the engine)
    openai_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_rate_limit: str = "10/minute"
    api_debug: bool = False
    api_cors_origins: list[str] = ["http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_dir: str = "logs"


settings = Settings()
