"""
ENDPOINTS DE CASOS DE SERVICIO TÉCNICO.

PRINCIPIO: esta capa NO contiene lógica de negocio.
Traduce HTTP <-> CaseService y decide si la respuesta es JSON o PDF.

Negociación:
- POST /cases y POST /cases/{id}/status devuelven el PDF generado
  cuando el cliente envía `Accept: application/pdf`
- el resto de documentos se pueden volver a descargar por GET
"""
from __future__ import annotations

import re
from io import BytesIO
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from printer_repair.core.database import get_db
from printer_repair.models.case_schemas import (
    CaseCreateRequest,
    CaseOut,
    StatusChangeRequest,
)
from printer_repair.services.case_service import CaseService

router = APIRouter(
    prefix="/cases",
    tags=["cases"],
)

PDF_MEDIA_TYPE = "application/pdf"


def get_case_service(request: Request, db: Session = Depends(get_db)) -> CaseService:
    """Servicio por request, con la configuración registrada en app.state."""
    return CaseService(
        db,
        request.app.state.settings,
        logo_loader=getattr(request.app.state, "logo_loader", None),
    )


def _wants_pdf(request: Request) -> bool:
    return PDF_MEDIA_TYPE in request.headers.get("accept", "")


def _safe_name(value: str) -> str:
    """Referencia apta para nombre de archivo."""
    return re.sub(r"[^A-Za-z0-9._-]+", "_", value).strip("_") or "impresora"


def _pdf_response(pdf_bytes: bytes, filename: str, status_code: int = 200) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type=PDF_MEDIA_TYPE,
        status_code=status_code,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _intake_filename(case: CaseOut) -> str:
    return f"Registro_{_safe_name(case.reference)}_{case.case_number}.pdf"


def _delivery_filename(case: CaseOut) -> str:
    return f"Entrega_{_safe_name(case.reference)}_{case.case_number}.pdf"


# =========================================================
# LISTADO / CONSULTA
# =========================================================

@router.get(
    "",
    response_model=List[CaseOut],
    summary="Listar casos",
    description="Casos ordenados por fecha de ingreso (más recientes primero).",
)
def list_cases(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    service: CaseService = Depends(get_case_service),
) -> List[CaseOut]:
    return service.list_cases(status=status_filter, search=search)


@router.get(
    "/report",
    summary="Listado de impresoras en PDF",
    response_class=StreamingResponse,
)
def listing_report(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    service: CaseService = Depends(get_case_service),
) -> StreamingResponse:
    pdf_bytes = service.listing_report(status=status_filter, search=search)
    filename = f"Listado_{service.clock().strftime('%Y%m%d')}.pdf"
    return _pdf_response(pdf_bytes, filename)


@router.get("/{case_id}", response_model=CaseOut, summary="Obtener caso")
def get_case(case_id: str, service: CaseService = Depends(get_case_service)) -> CaseOut:
    return service.get_case(case_id)


# =========================================================
# ALTA
# =========================================================

@router.post(
    "",
    response_model=CaseOut,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar impresora",
    description=(
        "Crea un caso en estado pending con el siguiente número consecutivo. "
        "Con `Accept: application/pdf` devuelve el registro de ingreso."
    ),
)
def create_case(
    payload: CaseCreateRequest,
    request: Request,
    service: CaseService = Depends(get_case_service),
):
    result = service.create_case(payload.model_dump())
    if _wants_pdf(request):
        return _pdf_response(
            result.document, _intake_filename(result.case), status.HTTP_201_CREATED
        )
    return result.case


# =========================================================
# ESTADO
# =========================================================

@router.post(
    "/{case_id}/status",
    response_model=CaseOut,
    summary="Cambiar estado",
    description=(
        "in_progress exige descripción del proceso y resolved el motivo de "
        "resolución. Al resolver con `Accept: application/pdf` devuelve el acta de entrega."
    ),
)
def change_status(
    case_id: str,
    payload: StatusChangeRequest,
    request: Request,
    service: CaseService = Depends(get_case_service),
):
    result = service.change_status(case_id, payload.status, payload.note)
    if result.document is not None and _wants_pdf(request):
        return _pdf_response(result.document, _delivery_filename(result.case))
    return result.case


# =========================================================
# EDICIÓN / BORRADO
# =========================================================

@router.patch("/{case_id}", response_model=CaseOut, summary="Editar caso")
def edit_case(
    case_id: str,
    fields: Dict[str, Any] = Body(...),
    service: CaseService = Depends(get_case_service),
) -> CaseOut:
    return service.edit_case(case_id, fields)


@router.delete("/{case_id}", summary="Eliminar caso")
def delete_case(case_id: str, service: CaseService = Depends(get_case_service)) -> dict:
    service.delete_case(case_id)
    return {"message": f"Caso {case_id} eliminado"}


# =========================================================
# DOCUMENTOS
# =========================================================

@router.get(
    "/{case_id}/intake-receipt",
    summary="Registro de ingreso en PDF",
    response_class=StreamingResponse,
)
def intake_receipt(case_id: str, service: CaseService = Depends(get_case_service)) -> StreamingResponse:
    result = service.intake_receipt(case_id)
    return _pdf_response(result.document, _intake_filename(result.case))


@router.get(
    "/{case_id}/delivery-certificate",
    summary="Acta de entrega en PDF (solo casos resueltos)",
    response_class=StreamingResponse,
)
def delivery_certificate(
    case_id: str, service: CaseService = Depends(get_case_service)
) -> StreamingResponse:
    result = service.delivery_certificate(case_id)
    return _pdf_response(result.document, _delivery_filename(result.case))
