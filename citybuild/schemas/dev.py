from __future__ import annotations

from typing import Optional

from pydantic import Field

from citybuild.schemas.primitives import CamelModel


class GenerateDatasetRequest(CamelModel):
    seed: Optional[int] = None
    num_gcs: int = Field(default=3, ge=1, le=50)
    num_subcontractors: int = Field(default=8, ge=0, le=200)
    num_suppliers: int = Field(default=3, ge=0, le=50)
    num_banks: int = Field(default=2, ge=0, le=50)
    projects_per_gc: int = Field(default=3, ge=0, le=50)
    bids_per_project: int = Field(default=3, ge=0, le=50)
    notifications_per_user: int = Field(default=5, ge=0, le=100)
    loans_per_bank: int = Field(default=3, ge=0, le=50)
    orders_per_supplier: int = Field(default=3, ge=0, le=50)
    payments_per_gc: int = Field(default=2, ge=0, le=50)
    inventory_per_supplier: int = Field(default=4, ge=0, le=100)
