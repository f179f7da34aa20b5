from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock HubSpot Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/hubspot_stub") if os.path.exists("/hubspot_stub") else Path(__file__).resolve().parents[1] / "hubspot_stub"


def load(name: str) -> dict:
    return json.loads((DATA_DIR / f"{name}.json").read_text())


def require_token(request: Request) -> None:
    if not request.headers.get("authorization", "").startswith("Bearer "):
        raise HTTPException(status_code=401, detail="missing bearer token")


def deal_view(deal_id: str, properties: list[str]) -> dict | None:
    deal = load("deals").get(deal_id)
    if deal is None:
        return None
    return {"id": deal_id, "properties": {key: deal.get(key) for key in properties}}


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/crm/v3/objects/contacts/search")
async def search_contacts(request: Request):
    require_token(request)
    body = await request.json()
    email = body["filterGroups"][0]["filters"][0]["value"]
    results = [
        {"id": contact_id, "properties": {key: contact.get(key) for key in body.get("properties", [])}}
        for contact_id, contact in load("contacts").items()
        if contact.get("email") == email
    ]
    return {"total": len(results), "results": results[: body.get("limit", 10)]}


@app.get("/crm/v4/objects/contacts/{contact_id}/associations/deals")
def contact_deals(contact_id: str, request: Request):
    require_token(request)
    deal_ids = load("associations").get(contact_id, [])
    return {"results": [{"toObjectId": int(deal_id)} for deal_id in deal_ids]}


@app.post("/crm/v3/objects/deals/batch/read")
async def batch_read_deals(request: Request):
    require_token(request)
    body = await request.json()
    results = [deal_view(item["id"], body.get("properties", [])) for item in body.get("inputs", [])]
    return JSONResponse(content={"status": "COMPLETE", "results": [r for r in results if r]})


@app.get("/crm/v3/objects/deals/{deal_id}")
def read_deal(deal_id: str, request: Request, properties: str = ""):
    require_token(request)
    deal = deal_view(deal_id, [p for p in properties.split(",") if p])
    if deal is None:
        raise HTTPException(status_code=404, detail="Object not found")
    return deal
