from dataclasses import dataclass
from typing import List, Optional, Union, Literal, Dict, Any
from pydantic import BaseModel, Field, ValidationError

from src.core.errors import MalformedResponseError

class Ingredient(BaseModel):
    name: str
    explanation: str

class IngredientList(BaseModel):
    kind: Literal["ingredients"] = "ingredients"
    ingredients: List[Ingredient] = Field(min_length=1)

class NoIngredientsFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    message: Optional[str] = None

    @property
    def ingredients(self) -> List[Ingredient]:
        return []

AnalysisResult = Union[IngredientList, NoIngredientsFound]

class _ResultPayload(BaseModel):
    # Wire shape returned by the model, before choosing a variant
    # Missing or null ingredients reads as "nothing found"
    ingredients: Optional[List[Ingredient]] = None
    message: Optional[str] = None

def parse_analysis_result(data: Any) -> AnalysisResult:
    """
    Validates decoded JSON and returns the matching result variant.
    A non-empty message wins over any ingredients that come with it.
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")

    try:
        payload = _ResultPayload(**data)
    except ValidationError as e:
        raise MalformedResponseError(f"Response does not match the result schema: {e}") from e

    message = payload.message.strip() if payload.message else None
    if message or not payload.ingredients:
        return NoIngredientsFound(message=message)
    return IngredientList(ingredients=payload.ingredients)

@dataclass(frozen=True)
class AnalysisRequest:
    prompt: str
    image_data: str # base64, no data: prefix
    media_type: str
    model: str
    max_tokens: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": self.media_type,
                            "data": self.image_data,
                        }
                    },
                    {
                        "type": "text",
                        "text": self.prompt,
                    }
                ]
            }]
        }
