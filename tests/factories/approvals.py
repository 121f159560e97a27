"""Factories for the approval source tables."""

from polyfactory import Use

from src.safeops.models import (
    ContractorCompany,
    ContractorWorker,
    Department,
    MaterialGatePass,
    PendingApprovalRequest,
)
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class DepartmentFactory(BaseFactory):
    __model__ = Department

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    name = "Operations"
    created_at = Use(utc_now)


class ContractorCompanyFactory(BaseFactory):
    __model__ = ContractorCompany

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    company_name = "Gulf Scaffolding LLC"
    status = "pending"
    created_at = Use(utc_now)
    updated_at = None
    deleted_at = None


class ContractorWorkerFactory(BaseFactory):
    __model__ = ContractorWorker

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    # FK fields - must be set explicitly
    company_id = None
    full_name = "Ahmed Saleh"
    worker_type = "scaffolder"
    approval_status = "pending"
    created_at = Use(utc_now)
    updated_at = None
    deleted_at = None


class MaterialGatePassFactory(BaseFactory):
    __model__ = MaterialGatePass

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    # FK fields - must be set explicitly
    company_id = None
    reference_number = Use(lambda: f"MGP-{generate_uuid().hex[-6:].upper()}")
    material_description = "Welding cylinders"
    pass_type = "inbound"
    status = "pending_pm_approval"
    created_at = Use(utc_now)
    updated_at = None
    deleted_at = None


class PendingApprovalRequestFactory(BaseFactory):
    __model__ = PendingApprovalRequest

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    reference_id = None
    reference_number = Use(lambda: f"REQ-{generate_uuid().hex[-6:].upper()}")
    title = "Forklift purchase"
    approval_type = "asset_purchase"
    priority = "normal"
    requested_by_name = "Sara Khan"
    status = "pending"
    created_at = Use(utc_now)
    updated_at = None
