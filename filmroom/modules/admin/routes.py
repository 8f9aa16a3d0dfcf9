from fastapi import APIRouter, Depends, Query
from filmroom.database.supabase_client import get_service_supabase
from filmroom.modules.admin.schemas import (
    DashboardResponse, OrganizationDetail, OrganizationListResponse, OrganizationStatus, SortField,
    TrialExtendRequest, TrialExtendResponse
)
from filmroom.modules.admin.service import AdminService
from filmroom.core.dependencies import require_platform_admin
from supabase import Client
from typing import Dict, Literal, Optional

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user_data: Dict = Depends(require_platform_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.get_dashboard()


@router.get("/organizations", response_model=OrganizationListResponse)
async def list_organizations(
    search: Optional[str] = None,
    status: Optional[OrganizationStatus] = None,
    sort_by: SortField = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(require_platform_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Search matches organization name or owner email"""
    return service.list_organizations(search, status, sort_by, sort_order, page, page_size)


@router.get("/organizations/{organization_id}", response_model=OrganizationDetail)
async def get_organization(
    organization_id: str,
    user_data: Dict = Depends(require_platform_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.get_organization(organization_id)


@router.put("/teams/{team_id}/trial", response_model=TrialExtendResponse)
async def extend_trial(
    team_id: str,
    body: TrialExtendRequest,
    user_data: Dict = Depends(require_platform_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.extend_trial(team_id, body.additional_days, user_data["id"])


@router.get("/system/stats")
async def get_system_stats(
    user_data: Dict = Depends(require_platform_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Database size and row counts from the get_db_stats function"""
    return service.get_system_stats()
