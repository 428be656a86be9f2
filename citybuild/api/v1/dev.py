# citybuild/api/v1/dev.py
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from citybuild.core.deps import get_store, require_dev
from citybuild.core.errors import MarketplaceError
from citybuild.core.http_errors import http_error
from citybuild.schemas.dev import GenerateDatasetRequest
from citybuild.services.data_generator import DataGenerator, DatasetOptions
from citybuild.services.data_seeder import DataSeeder
from citybuild.services.integrity_service import validate_data_integrity
from citybuild.services.local_storage import LocalStore

router = APIRouter(prefix="/dev", dependencies=[Depends(require_dev)])


@router.get("/export")
async def export_data(store: LocalStore = Depends(get_store)):
    return DataSeeder(store).export_snapshot()


@router.post("/import")
async def import_data(
    payload: Dict[str, Any] = Body(...),
    store: LocalStore = Depends(get_store),
):
    try:
        DataSeeder(store).import_data(json.dumps(payload))
    except MarketplaceError as e:
        raise http_error(e)
    return validate_data_integrity(store).to_json_dict()


@router.post("/reset")
async def reset(store: LocalStore = Depends(get_store)):
    DataSeeder(store).reset_to_initial_data()
    return validate_data_integrity(store).to_json_dict()


@router.get("/integrity")
async def integrity(store: LocalStore = Depends(get_store)):
    return validate_data_integrity(store).to_json_dict()


@router.post("/generate")
async def generate(
    body: Optional[GenerateDatasetRequest] = None,
    store: LocalStore = Depends(get_store),
):
    body = body or GenerateDatasetRequest()
    options = DatasetOptions(**body.model_dump(exclude={"seed"}))
    dataset = DataGenerator(seed=body.seed).generate_complete_dataset(options)
    DataSeeder(store).load_dataset(dataset)
    return validate_data_integrity(store).to_json_dict()
