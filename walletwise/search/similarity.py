"""Vector similarity."""

import math
from collections.abc import Sequence

from walletwise.exceptions import ErrorCode, ValidationError


def cosine_similarity(
    vec_a: Sequence[float] | None,
    vec_b: Sequence[float] | None,
) -> float:
    """Cosine of the angle between two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValidationError: If a vector is missing or the lengths differ.
    """
    if vec_a is None or vec_b is None or len(vec_a) != len(vec_b):
        raise ValidationError(
            "Vectors must have the same dimensions",
            code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
            details={
                "len_a": None if vec_a is None else len(vec_a),
                "len_b": None if vec_b is None else len(vec_b),
            },
        )

    dot = math.fsum(a * b for a, b in zip(vec_a, vec_b, strict=True))
    norm_a = math.sqrt(math.fsum(a * a for a in vec_a))
    norm_b = math.sqrt(math.fsum(b * b for b in vec_b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot / (norm_a * norm_b)
