# studybuddy/api/routes_scholar.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from studybuddy.services.citations import format_citation
from studybuddy.services.scholar_service import ScholarClient, ScholarError, get_scholar_client

router = APIRouter()


class CiteReq(BaseModel):
    result: Dict[str, Any]
    style: str = "apa"


@router.get("/search")
def search(q: Optional[str] = None,
           start: int = 0,
           client: ScholarClient = Depends(get_scholar_client)) -> Dict[str, Any]:
    """Proxy a Google Scholar search; the upstream JSON is returned as-is."""
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail='Query parameter "q" is required')
    try:
        return client.search(q.strip(), start=start)
    except ScholarError as e:
        raise HTTPException(status_code=e.status_code, detail=e.payload)


@router.post("/cite")
def cite(body: CiteReq) -> Dict[str, str]:
    try:
        citation = format_citation(body.result, body.style)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"style": body.style.lower(), "citation": citation}
