from pydantic import BaseModel, ConfigDict, Field, field_validator

USD = "USD"


class Asset(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str
    category: str
    currency: str = USD

    @field_validator("category")
    @classmethod
    def normalize_category(cls, value: str) -> str:
        category = value.strip().lower()
        if not category:
            raise ValueError("category must not be blank")
        return category

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"currency must be a 3-letter code, got '{value}'")
        return code

    @property
    def is_usd(self) -> bool:
        return self.currency == USD
