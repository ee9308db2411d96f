from pydantic import BaseModel


class CoinGeckoImage(BaseModel):
    thumb: str | None = None
    small: str | None = None
    large: str | None = None

    model_config = {"extra": "ignore"}


class CoinGeckoContractInfo(BaseModel):
    """Subset of /coins/{platform}/contract/{address}."""

    id: str = ""
    name: str = ""
    symbol: str = ""
    image: CoinGeckoImage | None = None

    model_config = {"extra": "ignore"}

    @property
    def image_url(self) -> str:
        if self.image is None:
            return ""
        return self.image.large or self.image.small or self.image.thumb or ""
