"""Fun fact lookup route."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from chronoshift.ai.fun_facts import FunFactClient

from . import deps

router = APIRouter(prefix="/api/fun-fact", tags=["fun-facts"])


@router.get("", response_model=dict)
def get_fun_fact(
    topic: str = Query(..., min_length=1, max_length=120),
    client: FunFactClient = Depends(deps.get_fun_fact_client),
) -> dict:
    try:
        return {"topic": topic, "fact": client.get_fun_fact(topic)}
    finally:
        client.close()
