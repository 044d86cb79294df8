from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field, field_validator

from services.shared.utils import to_decimal, to_identifier


class CreateBookingRequest(BaseModel):
    """予約作成リクエストモデル

    camelCase（flightId など）と snake_case のどちらのキーも受け付ける。
    """

    flight_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("flight_id", "flightId"),
        description="フライトID",
        examples=["1"],
    )
    user_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("user_id", "userId"),
        description="利用者ID",
        examples=["9"],
    )
    no_of_seats: int = Field(
        default=1,
        gt=0,
        validation_alias=AliasChoices("no_of_seats", "noOfSeats"),
        description="予約する座席数",
        examples=[2],
    )

    @field_validator("flight_id", "user_id", mode="before")
    @classmethod
    def normalize_identifier(cls, v):
        return to_identifier(v)


class MakePaymentRequest(BaseModel):
    """決済リクエストモデル（冪等性キーは x-idempotency-key ヘッダーで受け取る）"""

    booking_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("booking_id", "bookingId"),
    )
    user_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("user_id", "userId"),
    )
    total_cost: Decimal = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("total_cost", "totalCost"),
        description="支払金額（予約の total_cost と一致する必要がある）",
    )

    @field_validator("booking_id", "user_id", mode="before")
    @classmethod
    def normalize_identifier(cls, v):
        return to_identifier(v)

    @field_validator("total_cost", mode="before")
    @classmethod
    def convert_total_cost_to_decimal(cls, v):
        return to_decimal(v)
