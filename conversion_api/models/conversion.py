from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ConversionIn(BaseModel):
    """Body shared by every conversion route.

    Fields stay untyped so that presence and numeric checks produce the API's
    own error messages instead of pydantic validation output.
    """

    model_config = ConfigDict(populate_by_name=True)

    value: Any = Field(None, description="Number or numeric string to convert")
    from_unit: Any = Field(None, alias="from", description="Source unit or currency")
    to_unit: Any = Field(None, alias="to", description="Target unit or currency")


class ConversionOut(BaseModel):
    result: Union[int, float]


class CurrencyConversionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: Union[int, float]
    rate: Optional[float] = None
    last_updated: Optional[int] = Field(None, alias="lastUpdated")


class RatesOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rates: Dict[str, Dict[str, float]]
    last_updated: Optional[int] = Field(None, alias="lastUpdated")
