"""Tagged decode result for embedding provider responses.

Providers answer with slightly different JSON layouts (a flat array under
"embedding", a nested {"values": [...]} object, a list under "embeddings").
Each embed engine declares the layouts it knows in order; decode_embedding()
tries them one by one and returns Ok(vector) for the first usable one, or
Err(reason) listing why every layout was rejected.
"""

from numbers import Real
from typing import Any, Callable

from pydantic import BaseModel

# (shape name, extractor); the extractor returns the raw candidate or raises KeyError/IndexError/TypeError
ResponseShape = tuple[str, Callable[[dict], Any]]


class EmbeddingDecodeResult(BaseModel):
    """Outcome of decoding one embedding response.

    Attributes:
        ok:     True when a usable vector was found.
        vector: The decoded vector (only set when ok).
        shape:  Name of the response shape that matched (only set when ok).
        reason: Why decoding failed (only set when not ok).
    """

    ok: bool
    vector: list[float] | None = None
    shape: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, vector: list[float], shape: str) -> "EmbeddingDecodeResult":
        return cls(ok=True, vector=vector, shape=shape)

    @classmethod
    def failure(cls, reason: str) -> "EmbeddingDecodeResult":
        return cls(ok=False, reason=reason)


def _validate_vector(candidate: Any) -> list[float]:
    """Check a raw candidate is a non-empty list of numbers and convert it.

    Raises:
        ValueError: If the candidate is not a usable vector.
    """
    if not isinstance(candidate, list):
        raise ValueError(f"expected a list, got {type(candidate).__name__}")
    if not candidate:
        raise ValueError("vector is empty")
    # bool is a subclass of int but never a valid component
    if not all(isinstance(v, Real) and not isinstance(v, bool) for v in candidate):
        raise ValueError("vector contains non-numeric values")
    return [float(v) for v in candidate]


def decode_embedding(response_data: Any, shapes: list[ResponseShape]) -> EmbeddingDecodeResult:
    """Try every known response shape in order and return the first usable vector.

    Args:
        response_data (Any): Parsed JSON body of the embedding response.
        shapes (list[ResponseShape]): Known shapes, most specific first.

    Returns:
        EmbeddingDecodeResult: Ok with the vector, or Err with one reason per shape.
    """
    if not isinstance(response_data, dict):
        return EmbeddingDecodeResult.failure(f"response body is {type(response_data).__name__}, not an object")

    reasons: list[str] = []
    for name, extract in shapes:
        try:
            candidate = extract(response_data)
        except (KeyError, IndexError, TypeError):
            reasons.append(f"{name}: field missing")
            continue
        try:
            return EmbeddingDecodeResult.success(_validate_vector(candidate), shape=name)
        except ValueError as e:
            reasons.append(f"{name}: {e}")

    return EmbeddingDecodeResult.failure(
        "no known embedding field in response (keys: %s); %s"
        % (sorted(response_data.keys()), "; ".join(reasons))
    )
