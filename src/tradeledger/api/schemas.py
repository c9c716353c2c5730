"""Request and response bodies for the HTTP API.

Request schemas only check types. Value rules (positive amounts, supported
pairs) belong to the services, which raise InvalidArgumentError -> 400.
"""

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BuyRequest(BaseModel):
    symbol: str
    quantity: Decimal
    company_name: str | None = Field(default=None, validation_alias=AliasChoices("company_name", "companyName"))

    model_config = ConfigDict(populate_by_name=True)


class SellRequest(BaseModel):
    symbol: str
    quantity: Decimal


class ForexTradeRequest(BaseModel):
    pair: str
    amount: Decimal
    type: str


class AmountRequest(BaseModel):
    amount: Decimal


class BalanceUpdateRequest(BaseModel):
    balance: Decimal


class BalanceResponse(BaseModel):
    balance: Decimal
