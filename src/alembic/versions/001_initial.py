"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _str(length: int) -> sqlmodel.sql.sqltypes.AutoString:
    return sqlmodel.sql.sqltypes.AutoString(length=length)


def upgrade() -> None:
    # 1. Roles and per-tenant assignments
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", _str(50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "user_role_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("role_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_user_role_assignments_user_id", "user_role_assignments", ["user_id"], unique=False
    )
    op.create_index(
        "ix_user_role_assignments_tenant_id", "user_role_assignments", ["tenant_id"], unique=False
    )

    # 2. Approval sources
    op.create_table(
        "departments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("name", _str(200), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_departments_tenant_id", "departments", ["tenant_id"], unique=False)

    op.create_table(
        "contractor_companies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("company_name", _str(200), nullable=False),
        sa.Column("status", _str(30), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_contractor_companies_tenant_id", "contractor_companies", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_contractor_companies_tenant_status",
        "contractor_companies",
        ["tenant_id", "status"],
        unique=False,
    )

    op.create_table(
        "contractor_workers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=True),
        sa.Column("full_name", _str(200), nullable=False),
        sa.Column("worker_type", _str(50), nullable=True),
        sa.Column("approval_status", _str(30), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["contractor_companies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_contractor_workers_tenant_id", "contractor_workers", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_contractor_workers_tenant_approval",
        "contractor_workers",
        ["tenant_id", "approval_status"],
        unique=False,
    )

    op.create_table(
        "material_gate_passes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=True),
        sa.Column("reference_number", _str(50), nullable=True),
        sa.Column("material_description", _str(500), nullable=True),
        sa.Column("pass_type", _str(50), nullable=True),
        sa.Column("status", _str(50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["contractor_companies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_material_gate_passes_tenant_id", "material_gate_passes", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_material_gate_passes_tenant_status",
        "material_gate_passes",
        ["tenant_id", "status"],
        unique=False,
    )

    op.create_table(
        "pending_approvals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("reference_id", _str(50), nullable=True),
        sa.Column("reference_number", _str(50), nullable=True),
        sa.Column("title", _str(300), nullable=True),
        sa.Column("approval_type", _str(100), nullable=True),
        sa.Column("priority", _str(20), nullable=True),
        sa.Column("requested_by_name", _str(200), nullable=True),
        sa.Column("status", _str(30), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pending_approvals_tenant_id", "pending_approvals", ["tenant_id"])
    op.create_index(
        "ix_pending_approvals_tenant_status", "pending_approvals", ["tenant_id", "status"]
    )

    # 3. Incidents, corrective actions and the audit trail
    op.create_table(
        "incidents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("reference_id", _str(50), nullable=True),
        sa.Column("title", _str(300), nullable=False),
        sa.Column("event_type", _str(30), nullable=False, server_default="observation"),
        sa.Column("severity", sa.Integer(), nullable=False),
        sa.Column("status", _str(50), nullable=False, server_default="draft"),
        sa.Column("department_id", sa.Uuid(), nullable=True),
        sa.Column("reporter_id", sa.Uuid(), nullable=True),
        sa.Column(
            "closure_requires_manager",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("hsse_validation_status", _str(20), nullable=True),
        sa.Column("hsse_validated_by", sa.Uuid(), nullable=True),
        sa.Column("hsse_validated_at", sa.DateTime(), nullable=True),
        sa.Column("hsse_validation_notes", _str(2000), nullable=True),
        sa.Column("hsse_manager_decision", _str(20), nullable=True),
        sa.Column("hsse_manager_decision_by", sa.Uuid(), nullable=True),
        sa.Column("hsse_manager_justification", _str(2000), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("severity BETWEEN 1 AND 5", name="ck_incidents_severity_range"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_incidents_tenant_id", "incidents", ["tenant_id"], unique=False)
    op.create_index("ix_incidents_tenant_status", "incidents", ["tenant_id", "status"])
    op.create_index("ix_incidents_tenant_updated", "incidents", ["tenant_id", "updated_at"])

    op.create_table(
        "corrective_actions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("incident_id", sa.Uuid(), nullable=False),
        sa.Column("title", _str(300), nullable=False),
        sa.Column("status", _str(30), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["incident_id"], ["incidents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_corrective_actions_tenant_id", "corrective_actions", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_corrective_actions_incident_status",
        "corrective_actions",
        ["incident_id", "status"],
        unique=False,
    )

    op.create_table(
        "incident_audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("incident_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("action", _str(50), nullable=False),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("request_id", _str(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["incident_id"], ["incidents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_incident_audit_logs_incident_created",
        "incident_audit_logs",
        ["incident_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_incident_audit_logs_tenant_created",
        "incident_audit_logs",
        ["tenant_id", "created_at"],
        unique=False,
    )

    # 4. Generic workflow tracking
    op.create_table(
        "workflow_instances",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("workflow_id", sa.Uuid(), nullable=True),
        sa.Column("workflow_key", _str(100), nullable=False),
        sa.Column("entity_type", _str(50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("current_step_id", _str(100), nullable=True),
        sa.Column("status", _str(20), nullable=False, server_default="active"),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("started_by", sa.Uuid(), nullable=True),
        sa.Column(
            "participants",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default="[]",
        ),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_instances_tenant_id", "workflow_instances", ["tenant_id"])
    op.create_index(
        "ix_workflow_instances_tenant_key_status",
        "workflow_instances",
        ["tenant_id", "workflow_key", "status"],
    )
    op.create_index(
        "ix_workflow_instances_tenant_started", "workflow_instances", ["tenant_id", "started_at"]
    )
    op.create_index(
        "ix_workflow_instances_entity", "workflow_instances", ["entity_type", "entity_id"]
    )

    op.create_table(
        "workflow_step_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("instance_id", sa.Uuid(), nullable=False),
        sa.Column("step_id", _str(100), nullable=False),
        sa.Column("step_name", _str(200), nullable=True),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("action_taken", _str(100), nullable=True),
        sa.Column("notes", _str(2000), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["instance_id"], ["workflow_instances.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workflow_step_history_instance_started",
        "workflow_step_history",
        ["instance_id", "started_at"],
    )
    op.create_index(
        "ix_workflow_step_history_open", "workflow_step_history", ["tenant_id", "completed_at"]
    )
    op.create_index(
        "uq_workflow_step_history_one_open",
        "workflow_step_history",
        ["instance_id"],
        unique=True,
        postgresql_where=sa.text("completed_at IS NULL"),
    )

    op.create_table(
        "workflow_live_status",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("workflow_key", _str(100), nullable=False),
        sa.Column("active_instances", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_today", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("avg_completion_time_hours", sa.Float(), nullable=True),
        sa.Column("bottleneck_step", _str(100), nullable=True),
        sa.Column("bottleneck_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("performance_trend", _str(20), nullable=False, server_default="stable"),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id", "workflow_key", name="uq_workflow_live_status_tenant_key"
        ),
    )
    op.create_index("ix_workflow_live_status_tenant_id", "workflow_live_status", ["tenant_id"])


def downgrade() -> None:
    op.drop_table("workflow_live_status")
    op.drop_table("workflow_step_history")
    op.drop_table("workflow_instances")
    op.drop_table("incident_audit_logs")
    op.drop_table("corrective_actions")
    op.drop_table("incidents")
    op.drop_table("pending_approvals")
    op.drop_table("material_gate_passes")
    op.drop_table("contractor_workers")
    op.drop_table("contractor_companies")
    op.drop_table("departments")
    op.drop_table("user_role_assignments")
    op.drop_table("roles")
