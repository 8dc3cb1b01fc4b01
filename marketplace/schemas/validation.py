"""
Проверка входных данных по именованным схемам.
Возвращает все нарушения сразу, исключений не бросает.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from marketplace.schemas.listing import ListingPayload
from marketplace.schemas.review import ReviewPayload
from marketplace.schemas.user import SignupPayload, LoginPayload

SCHEMAS: Dict[str, Type[BaseModel]] = {
    "listing": ListingPayload,
    "review": ReviewPayload,
    "user-signup": SignupPayload,
    "user-login": LoginPayload,
}


@dataclass
class Violation:
    """Нарушение правила для одного поля"""
    field: str
    message: str

    def __str__(self) -> str:
        return f'"{self.field}" {self.message}'


@dataclass
class ValidationResult:
    value: Optional[BaseModel] = None
    errors: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> List[str]:
        return [str(v) for v in self.errors]


def validate_payload(schema: Union[str, Type[BaseModel]], payload: Any) -> ValidationResult:
    """Проверяет payload по схеме (объект схемы или ее имя из SCHEMAS)"""
    if isinstance(schema, str):
        schema = SCHEMAS[schema]

    try:
        value = schema.model_validate(payload)
    except ValidationError as e:
        violations = [
            Violation(
                field=".".join(str(part) for part in err["loc"]) or "payload",
                message=err["msg"],
            )
            for err in e.errors()
        ]
        return ValidationResult(errors=violations)

    return ValidationResult(value=value)
