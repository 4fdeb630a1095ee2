# src/simulation/domain/whatsapp_types.py
"""
WhatsApp Cloud API wire types (Graph API v21.0 shapes).

Only the parts the simulator accepts or emits are modelled: the template
message request, the send acknowledgement and the status callback envelope.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Language(BaseModel):
    code: str = Field(..., min_length=1, examples=["en_US"])


class MediaObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    link: Optional[str] = None
    id: Optional[str] = None
    filename: Optional[str] = None


class Currency(BaseModel):
    fallback_value: str
    code: str
    amount_1000: int


class DateTimeValue(BaseModel):
    fallback_value: str


ParameterType = Literal["text", "currency", "date_time", "image", "video", "document", "payload"]


class ComponentParameter(BaseModel):
    """One template parameter; the field named after ``type`` must be present."""
    model_config = ConfigDict(extra="allow")

    type: ParameterType
    text: Optional[str] = None
    payload: Optional[str] = None
    currency: Optional[Currency] = None
    date_time: Optional[DateTimeValue] = None
    image: Optional[MediaObject] = None
    video: Optional[MediaObject] = None
    document: Optional[MediaObject] = None

    @model_validator(mode="after")
    def _value_for_type(self) -> "ComponentParameter":
        if getattr(self, self.type) is None:
            raise ValueError(f"parameter of type '{self.type}' requires '{self.type}'")
        return self


class TemplateComponent(BaseModel):
    type: Literal["header", "body", "button", "footer"]
    sub_type: Optional[Literal["quick_reply", "url", "catalog"]] = None
    index: Optional[str] = Field(None, pattern=r"^\d+$")
    parameters: List[ComponentParameter]

    @model_validator(mode="after")
    def _button_fields(self) -> "TemplateComponent":
        if self.type == "button":
            if self.sub_type is None or self.index is None:
                raise ValueError("button components require 'sub_type' and 'index'")
        elif self.sub_type is not None or self.index is not None:
            raise ValueError("'sub_type' and 'index' are only allowed on button components")
        return self


class Template(BaseModel):
    name: str = Field(..., min_length=1)
    language: Language
    components: Optional[List[TemplateComponent]] = None


class TemplateMessagePayload(BaseModel):
    """Body of ``POST /{phone_number_id}/messages`` for a template message."""
    model_config = ConfigDict(extra="allow")

    messaging_product: Literal["whatsapp"]
    recipient_type: Literal["individual"] = "individual"
    to: str = Field(..., min_length=1)
    type: Literal["template"]
    template: Template


class Contact(BaseModel):
    input: str
    wa_id: str


class MessageRef(BaseModel):
    id: str


class SendMessageResponse(BaseModel):
    messaging_product: Literal["whatsapp"] = "whatsapp"
    contacts: List[Contact]
    messages: List[MessageRef]


StatusPayload = Dict[str, Any]
