"""pm_darkpool REST endpoints.

POST /darkpool/commitments  - commit a hidden order
GET  /darkpool/commitments  - locally pending commitments
GET  /darkpool/commitments/{hash}  - one pending commitment (no salt)
POST /darkpool/commitments/{hash}/retry  - re-broadcast a failed commit
POST /darkpool/commitments/{hash}/confirm  - wait for a commit/reveal/cancel receipt
GET  /darkpool/commitments/{hash}/reveal-status  - reveal window
POST /darkpool/commitments/{hash}/reveal  - prove and reveal
POST /darkpool/commitments/{hash}/abandon  - stop an in-flight proof
POST /darkpool/commitments/{hash}/cancel  - cancel and reclaim escrow
GET  /darkpool/commitments/{hash}/ledger  - on-ledger commitment details
GET  /darkpool/orders/{order_hash}  - revealed order
GET  /darkpool/traders/{address}/orders  - a trader's order hashes
GET  /darkpool/statistics  - per-instrument statistics
GET  /darkpool/orders-active-count  - active order count
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, Request

from src.pm_common.response import ApiResponse, success_response
from src.pm_darkpool.application.schemas import ConfirmRequest, SubmitCommitRequest
from src.pm_darkpool.application.service import (
    DarkPoolApplicationService,
    get_darkpool_service,
)

router = APIRouter(prefix="/darkpool", tags=["darkpool"])

Service = Annotated[DarkPoolApplicationService, Depends(get_darkpool_service)]
Bytes32 = Annotated[str, Path(pattern=r"^0x[0-9a-fA-F]{64}$")]
Address = Annotated[str, Path(pattern=r"^0x[0-9a-fA-F]{40}$")]


def _respond(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/commitments", status_code=201)
async def submit_commit(req: SubmitCommitRequest, request: Request, svc: Service) -> ApiResponse:
    result = await svc.submit_commit(req)
    return _respond(request, result.model_dump())


@router.get("/commitments")
async def list_pending(request: Request, svc: Service) -> ApiResponse:
    result = await svc.list_pending()
    return _respond(request, result.model_dump())


@router.get("/commitments/{commitment_hash}")
async def get_pending(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.get_pending(commitment_hash)
    return _respond(request, result.model_dump())


@router.post("/commitments/{commitment_hash}/retry")
async def retry_commit(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.retry_commit(commitment_hash)
    return _respond(request, result.model_dump())


@router.post("/commitments/{commitment_hash}/confirm")
async def confirm(
    commitment_hash: Bytes32, req: ConfirmRequest, request: Request, svc: Service
) -> ApiResponse:
    result = await svc.confirm(commitment_hash, req)
    return _respond(request, result.model_dump())


@router.get("/commitments/{commitment_hash}/reveal-status")
async def reveal_status(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.reveal_status(commitment_hash)
    return _respond(request, result.model_dump())


@router.post("/commitments/{commitment_hash}/reveal")
async def submit_reveal(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.submit_reveal(commitment_hash)
    return _respond(request, result.model_dump())


@router.post("/commitments/{commitment_hash}/abandon")
async def abandon_reveal(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.abandon_reveal(commitment_hash)
    return _respond(request, result.model_dump())


@router.post("/commitments/{commitment_hash}/cancel")
async def cancel(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.cancel(commitment_hash)
    return _respond(request, result.model_dump())


@router.get("/commitments/{commitment_hash}/ledger")
async def commitment_details(commitment_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.commitment_details(commitment_hash)
    return _respond(request, result.model_dump())


@router.get("/orders/{order_hash}")
async def get_order(order_hash: Bytes32, request: Request, svc: Service) -> ApiResponse:
    result = await svc.get_order(order_hash)
    return _respond(request, result.model_dump() if result is not None else None)


@router.get("/traders/{address}/orders")
async def get_trader_orders(address: Address, request: Request, svc: Service) -> ApiResponse:
    result = await svc.get_trader_orders(address)
    return _respond(request, result.model_dump())


@router.get("/statistics")
async def get_statistics(
    request: Request,
    svc: Service,
    instrument_address: str = Query(..., pattern=r"^0x[0-9a-fA-F]{40}$"),
    instrument_id: int = Query(..., ge=0),
) -> ApiResponse:
    result = await svc.get_statistics(instrument_address, instrument_id)
    return _respond(request, result.model_dump())


@router.get("/orders-active-count")
async def active_orders_count(request: Request, svc: Service) -> ApiResponse:
    result = await svc.active_orders_count()
    return _respond(request, result.model_dump())
