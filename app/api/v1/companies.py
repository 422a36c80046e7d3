"""
Client companies API

Companies move through the client funnel; the CNPJ lookup proxies ReceitaWS
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    DictResponse,
)
from app.core.exceptions import NotFoundException, ConflictException, BadRequestException
from app.crud import company_crud
from app.models.company import (
    Company,
    CompanyCreate,
    CompanyUpdate,
    CompanyMove,
    CompanyResponse,
)
from app.models.user import User
from app.services.cnpj import CNPJLookupClient, get_cnpj_client, format_cnpj
from app.services.pipeline import CLIENT_STAGES, get_stage, plan_transition, InvalidStageError

router = APIRouter()


def _to_response(company: Company, job_count: int = 0) -> dict:
    response = CompanyResponse.model_validate(company)
    response.cnpj_formatted = format_cnpj(company.cnpj)
    stage = get_stage(CLIENT_STAGES, company.stage_slug)
    response.stage_name = stage.name if stage else None
    response.job_count = job_count
    return response.model_dump()


@router.get("/cnpj/{cnpj}", summary="Look up a CNPJ", response_model=DictResponse)
async def lookup_cnpj(
    cnpj: str,
    client: CNPJLookupClient = Depends(get_cnpj_client),
    user: User = Depends(require_user),
):
    data = await client.lookup(cnpj)
    return success_response(data=data)


@router.get("", summary="List companies", response_model=PagedResponseModel[CompanyResponse])
async def get_companies(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    stage_slug: Optional[str] = Query(None, description="Client funnel stage"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    conditions = [Company.stage_slug == stage_slug] if stage_slug else []
    companies = await company_crud.get_multi(
        db, skip=skip, limit=page_size, order_by=Company.name, conditions=conditions
    )
    total = await company_crud.count(db, conditions=conditions)
    counts = await company_crud.job_counts(db)
    items = [_to_response(c, counts.get(c.id, 0)) for c in companies]
    return paged_response(items, total, page, page_size)


@router.post("", summary="Create company", response_model=ResponseModel[CompanyResponse])
async def create_company(
    data: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await company_crud.get_by_cnpj(db, data.cnpj):
        raise ConflictException(f"CNPJ already registered: {format_cnpj(data.cnpj)}")
    fields = data.model_dump(exclude={"status"})
    fields["stage_slug"] = data.initial_stage()
    company = await company_crud.create(db, obj_in=fields)
    return success_response(data=_to_response(company), message="Company created")


@router.get("/{company_id}", summary="Get company", response_model=ResponseModel[CompanyResponse])
async def get_company(
    company_id: str,
    db: AsyncSession = Depends(get_db),
):
    company = await company_crud.get(db, company_id)
    if not company:
        raise NotFoundException(f"Company not found: {company_id}")
    counts = await company_crud.job_counts(db)
    return success_response(data=_to_response(company, counts.get(company.id, 0)))


@router.patch("/{company_id}", summary="Update company", response_model=ResponseModel[CompanyResponse])
async def update_company(
    company_id: str,
    data: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    company = await company_crud.get(db, company_id)
    if not company:
        raise NotFoundException(f"Company not found: {company_id}")

    if data.cnpj and data.cnpj != company.cnpj:
        if await company_crud.get_by_cnpj(db, data.cnpj):
            raise ConflictException(f"CNPJ already registered: {format_cnpj(data.cnpj)}")

    company = await company_crud.update(db, db_obj=company, obj_in=data.model_dump(exclude_unset=True))
    return success_response(data=_to_response(company), message="Company updated")


@router.post("/{company_id}/move", summary="Move company to another stage", response_model=DictResponse)
async def move_company(
    company_id: str,
    data: CompanyMove,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    company = await company_crud.get(db, company_id)
    if not company:
        raise NotFoundException(f"Company not found: {company_id}")

    try:
        transition = plan_transition(CLIENT_STAGES, company.stage_slug, data.to_stage)
    except InvalidStageError as e:
        raise BadRequestException(str(e))

    if transition is not None:
        company = await company_crud.update(db, db_obj=company, obj_in={"stage_slug": transition.target.slug})
        logger.info(f"Company {company.id}: {transition.description}")

    return success_response(data={
        "changed": transition is not None,
        "company": _to_response(company),
    })
