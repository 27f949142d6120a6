from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every payload on the wire: snake_case in Python, camelCase in JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorItem(BaseModel):
    msg: str
    code: Optional[str] = None
    field: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    errors: List[ErrorItem]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def fail(cls, message: str, code: Optional[str] = None) -> "ErrorResponse":
        return cls(errors=[ErrorItem(msg=message, code=code)])
