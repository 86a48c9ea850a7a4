"""AssetPair value object - the traded market (e.g., BTC/USDT)."""

from dataclasses import dataclass

from copy_worker.domain.shared import ValueObject, validate_value_object


@dataclass(frozen=True)
class AssetPair(ValueObject):
    """Base/quote asset pair.

    Example:
        >>> pair = AssetPair.parse("btc/usdt")
        >>> pair.symbol  # "BTC/USDT"
    """

    base: str
    quote: str

    def __post_init__(self) -> None:
        validate_value_object(bool(self.base) and bool(self.quote), "Asset pair requires base and quote")
        validate_value_object(
            self.base.isalnum() and self.quote.isalnum(),
            f"Invalid asset code in pair {self.base}/{self.quote}",
        )
        validate_value_object(
            self.base == self.base.upper() and self.quote == self.quote.upper(),
            "Asset codes must be upper-case",
        )
        validate_value_object(self.base != self.quote, "Base and quote must differ")

    @classmethod
    def parse(cls, value: str) -> "AssetPair":
        """Parse "BASE/QUOTE" (case-insensitive).

        Raises:
            ValueError: If value is not in BASE/QUOTE form.
        """
        parts = value.strip().upper().split("/")
        if len(parts) != 2:
            raise ValueError(f"Asset pair must be BASE/QUOTE, got {value!r}")
        return cls(base=parts[0], quote=parts[1])

    @property
    def symbol(self) -> str:
        return f"{self.base}/{self.quote}"

    def __str__(self) -> str:
        return self.symbol
