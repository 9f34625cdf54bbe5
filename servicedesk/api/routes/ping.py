from fastapi import APIRouter, HTTPException

from servicedesk.dependencies.tickets import PostgresDep

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Public health probe")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/database", summary="Database connectivity probe")
async def ping_database(postgres: PostgresDep) -> dict[str, str]:
    try:
        reachable = await postgres.ping()
    except Exception as exc:
        raise HTTPException(status_code=503, detail="Database is unreachable") from exc
    if not reachable:
        raise HTTPException(status_code=503, detail="Database is unreachable")
    return {"status": "ok", "database": "reachable"}
