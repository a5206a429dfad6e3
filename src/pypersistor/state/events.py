"""Events the persistor dispatches to the store."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from pypersistor._constants import REHYDRATE


class RehydrateEvent(BaseModel):
    """Carries the reconstructed state to the store's reducer."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["persist/REHYDRATE"] = REHYDRATE
    payload: Any = None
