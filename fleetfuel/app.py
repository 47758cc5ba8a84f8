import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .engines import AnalyticsEngine, LifecycleEngine, Registry, StatusHistoryEngine
from .errors import ReferentialFailure, ValidationFailure
from .models import (
    CloseRequest, DailyBreakdown, DailyLogEntry, DeleteResponse, FuelEntry, FuelType, HealthResponse, HistoryRow,
    OpenDailyLogRequest, OpenFuelEntryRequest, ProjectSummary, RecordFilter, RecordKind, RecordStatus,
    RegisterVehicleRequest, RentalCost, StatusChangeRequest, Supplier, SupplierRequest, TimelineRow,
    UpdateVehicleRequest, Vehicle, VehiclePerformance, VehicleStats,
)
from .persistence import PersistenceAdapter, Repository, make_adapter

logger = logging.getLogger("fleetfuel.app")


def record_filter(
    project_id: Optional[str] = None,
    fuel_type: Optional[FuelType] = None,
    vehicle_id: Optional[str] = None,
    supplier_id: Optional[str] = None,
    status: Optional[RecordStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
) -> RecordFilter:
    return RecordFilter(
        project_id=project_id, fuel_type=fuel_type, vehicle_id=vehicle_id, supplier_id=supplier_id,
        status=status, date_from=date_from, date_to=date_to, search=search,
    )


def create_app(settings: Optional[Settings] = None, adapter: Optional[PersistenceAdapter] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    repo = Repository(adapter or make_adapter(settings))
    store = repo.load()
    lifecycle = LifecycleEngine(store)
    status_engine = StatusHistoryEngine(store)
    registry = Registry(store)
    analytics = AnalyticsEngine(store, mileage_benchmark=settings.mileage_benchmark)

    app = FastAPI(title="Fleet Fuel Tracker", version="0.9")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins, allow_methods=["*"], allow_headers=["*"],
    )
    app.state.store = store
    app.state.repository = repo

    @app.exception_handler(ValidationFailure)
    async def _on_validation_failure(request: Request, exc: ValidationFailure):
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(ReferentialFailure)
    async def _on_referential_failure(request: Request, exc: ReferentialFailure):
        return JSONResponse(status_code=404, content=exc.to_dict())

    def commit() -> None:
        saved = repo.commit(store)
        if saved:
            logger.debug("Persisted %s", saved)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(
            status="healthy",
            vehicles=len(store.vehicles),
            fuel_entries=len(store.fuel_entries),
            daily_logs=len(store.daily_logs),
            suppliers=len(store.suppliers),
        )

    # ----------- vehicles -----------
    @app.post("/vehicles", response_model=Vehicle, status_code=201)
    def endpoint_register_vehicle(req: RegisterVehicleRequest):
        vehicle = status_engine.register_vehicle(
            project_id=req.project_id,
            vehicle_name=req.vehicle_name,
            vehicle_number=req.vehicle_number,
            fuel_type=req.fuel_type,
            start_date=req.start_date,
            vehicle_type=req.vehicle_type,
            status=req.status,
            rent_rate=req.rent_rate,
        )
        commit()
        return vehicle

    @app.get("/vehicles", response_model=List[Vehicle])
    def endpoint_list_vehicles(project_id: Optional[str] = None):
        return [v for v in store.vehicles.values() if project_id is None or v.project_id == project_id]

    @app.get("/vehicles/{vehicle_id}", response_model=Vehicle)
    def endpoint_get_vehicle(vehicle_id: str):
        return store.get_vehicle(vehicle_id)

    @app.patch("/vehicles/{vehicle_id}", response_model=Vehicle)
    def endpoint_update_vehicle(vehicle_id: str, req: UpdateVehicleRequest):
        vehicle = registry.update_vehicle(vehicle_id, **req.model_dump(exclude_unset=True))
        commit()
        return vehicle

    @app.delete("/vehicles/{vehicle_id}", response_model=DeleteResponse)
    def endpoint_delete_vehicle(vehicle_id: str, force: bool = False):
        registry.delete_vehicle(vehicle_id, force=force)
        commit()
        return DeleteResponse(deleted=vehicle_id)

    @app.post("/vehicles/{vehicle_id}/status", response_model=Vehicle)
    def endpoint_change_status(vehicle_id: str, req: StatusChangeRequest):
        vehicle = status_engine.change_status(vehicle_id, req.effective_date, req.reason)
        commit()
        return vehicle

    @app.get("/vehicles/{vehicle_id}/timeline", response_model=List[TimelineRow])
    def endpoint_timeline(vehicle_id: str, today: Optional[date] = None):
        return status_engine.status_timeline(vehicle_id, today)

    @app.get("/vehicles/{vehicle_id}/stats", response_model=VehicleStats)
    def endpoint_vehicle_stats(vehicle_id: str):
        return analytics.vehicle_stats(vehicle_id)

    @app.get("/vehicles/{vehicle_id}/rental-cost", response_model=RentalCost)
    def endpoint_rental_cost(vehicle_id: str, as_of: Optional[date] = None):
        return analytics.rental_cost(vehicle_id, as_of)

    @app.get("/vehicles/{vehicle_id}/daily", response_model=DailyBreakdown)
    def endpoint_daily_breakdown(vehicle_id: str, date_from: Optional[date] = None, date_to: Optional[date] = None):
        return analytics.daily_breakdown(vehicle_id, date_from, date_to)

    # ----------- suppliers -----------
    @app.post("/suppliers", response_model=Supplier, status_code=201)
    def endpoint_add_supplier(req: SupplierRequest):
        supplier = registry.add_supplier(**req.model_dump())
        commit()
        return supplier

    @app.get("/suppliers", response_model=List[Supplier])
    def endpoint_list_suppliers(project_id: Optional[str] = None):
        return [s for s in store.suppliers.values() if project_id is None or s.project_id == project_id]

    @app.delete("/suppliers/{supplier_id}", response_model=DeleteResponse)
    def endpoint_delete_supplier(supplier_id: str):
        registry.delete_supplier(supplier_id)
        commit()
        return DeleteResponse(deleted=supplier_id)

    # ----------- fuel entries -----------
    @app.post("/fuel-entries", response_model=FuelEntry, status_code=201)
    def endpoint_open_fuel_entry(req: OpenFuelEntryRequest):
        entry = lifecycle.open_fuel_entry(**req.model_dump())
        commit()
        return entry

    @app.post("/fuel-entries/{entry_id}/close", response_model=FuelEntry)
    def endpoint_close_fuel_entry(entry_id: str, req: CloseRequest):
        entry = lifecycle.close_fuel_entry(entry_id, req.closing_km, req.closing_km_photo)
        commit()
        return entry

    @app.delete("/fuel-entries/{entry_id}", response_model=DeleteResponse)
    def endpoint_delete_fuel_entry(entry_id: str):
        lifecycle.delete_fuel_entry(entry_id)
        commit()
        return DeleteResponse(deleted=entry_id)

    @app.get("/fuel-entries", response_model=List[FuelEntry])
    def endpoint_list_fuel_entries(f: RecordFilter = Depends(record_filter)):
        return analytics.fuel_entries(f)

    @app.get("/fuel-entries/cumulative-distance")
    def endpoint_cumulative_distance(f: RecordFilter = Depends(record_filter)) -> Dict[str, float]:
        return {"cumulativeDistance": analytics.cumulative_distance(f)}

    # ----------- daily logs -----------
    @app.post("/daily-logs", response_model=DailyLogEntry, status_code=201)
    def endpoint_open_daily_log(req: OpenDailyLogRequest):
        log = lifecycle.open_daily_log(**req.model_dump())
        commit()
        return log

    @app.post("/daily-logs/{log_id}/close", response_model=DailyLogEntry)
    def endpoint_close_daily_log(log_id: str, req: CloseRequest):
        log = lifecycle.close_daily_log(log_id, req.closing_km, req.closing_km_photo)
        commit()
        return log

    @app.delete("/daily-logs/{log_id}", response_model=DeleteResponse)
    def endpoint_delete_daily_log(log_id: str):
        lifecycle.delete_daily_log(log_id)
        commit()
        return DeleteResponse(deleted=log_id)

    @app.get("/daily-logs", response_model=List[DailyLogEntry])
    def endpoint_list_daily_logs(f: RecordFilter = Depends(record_filter)):
        return analytics.daily_logs(f)

    # ----------- project analytics -----------
    @app.get("/projects/{project_id}/summary", response_model=ProjectSummary)
    def endpoint_project_summary(project_id: str):
        return analytics.project_summary(project_id)

    @app.get("/projects/{project_id}/cost-by-fuel")
    def endpoint_cost_by_fuel(project_id: str) -> Dict[str, float]:
        return analytics.cost_by_fuel_type(project_id)

    @app.get("/projects/{project_id}/litres-by-fuel")
    def endpoint_litres_by_fuel(project_id: str) -> Dict[str, float]:
        return analytics.litres_by_fuel_type(project_id)

    @app.get("/projects/{project_id}/performance", response_model=List[VehiclePerformance])
    def endpoint_performance(project_id: str, limit: Optional[int] = None):
        return analytics.vehicle_performance(project_id, limit=limit or settings.top_performers)

    @app.get("/projects/{project_id}/today", response_model=List[FuelEntry])
    def endpoint_today(project_id: str, today: Optional[date] = None):
        return analytics.today_entries(project_id, today)

    @app.get("/projects/{project_id}/available-vehicles", response_model=List[Vehicle])
    def endpoint_available_vehicles(project_id: str, kind: RecordKind = "fuel"):
        return analytics.available_vehicles(project_id, kind)

    @app.get("/history", response_model=List[HistoryRow])
    def endpoint_history(f: RecordFilter = Depends(record_filter)):
        return analytics.history(f)

    return app


app = create_app()
