from typing import Any

from agentgraph_common.base.models import RESOURCE_ID_LENGTH, BaseModel, ProjectScopedMixin
from sqlalchemy import JSON, ForeignKeyConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column


class CredentialReference(BaseModel, ProjectScopedMixin):
    """Pointer to a secret held by a named credential store.

    ``retrieval_params`` tells the store how to find the secret, usually
    ``{"key": "<store key>"}``.
    """

    __tablename__ = "credential_references"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id"],
            ["projects.tenant_id", "projects.id"],
            name="credential_references_project_fk",
            ondelete="CASCADE",
        ),
    )

    type: Mapped[str] = mapped_column(String(50), nullable=False)
    credential_store_id: Mapped[str] = mapped_column(String(255), nullable=False)
    retrieval_params: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class EncryptedCredential(BaseModel):
    """Fernet-encrypted secret of the database credential store."""

    __tablename__ = "encrypted_credentials"

    tenant_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    encrypted_value: Mapped[str] = mapped_column(Text, nullable=False)
