"""
Shared path parameters
"""

from typing import Annotated

from fastapi import Path

from marketplace.validation.schemas import MAX_ROW_ID

# Anything outside the key range is rejected with a 400
ResourceId = Annotated[int, Path(ge=1, le=MAX_ROW_ID, description="Row id")]
