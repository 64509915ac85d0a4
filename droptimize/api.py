"""
FastAPI application exposing driver speed status and delivery ETAs.
"""

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .errors import InvalidArgument
from .models import GeoPoint
from .schemas import (
    EtaRequest, EtaResponse, HealthResponse, PointIn, SpeedStatusResponse, load_config
)
from .service import DriverNotFound, DroptimizeService


logger = logging.getLogger(__name__)

# Global service instance
service: Optional[DroptimizeService] = None


def get_service() -> DroptimizeService:
    """Dependency to get service instance."""
    global service
    if service is None:
        service = DroptimizeService(load_config())
    return service


def _point_out(point: Optional[GeoPoint]) -> Optional[PointIn]:
    if point is None:
        return None
    return PointIn(latitude=point.latitude, longitude=point.longitude)


def _points_in(points: List[PointIn]) -> List[GeoPoint]:
    return [GeoPoint(p.latitude, p.longitude) for p in points]


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Droptimize",
        description="Driver speed-zone status and delivery ETA estimation",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check(svc: DroptimizeService = Depends(get_service)):
        """Health check endpoint."""
        health_data = svc.health_check()
        return HealthResponse(version=__version__, **health_data)

    @app.get(
        "/branches/{branch_id}/drivers/{driver_id}/speed-status",
        response_model=SpeedStatusResponse,
    )
    async def speed_status(branch_id: str, driver_id: str, svc: DroptimizeService = Depends(get_service)):
        """Current speed, governing limit and overspeed flag for a driver."""
        try:
            status = await svc.driver_speed_status(driver_id, branch_id)
        except DriverNotFound:
            raise HTTPException(status_code=404, detail=f"Driver {driver_id} not found")
        return SpeedStatusResponse(
            driver_id=status.driver_id,
            location=_point_out(status.location),
            speed_kmh=status.speed_kmh,
            speed_limit_kmh=status.speed_limit_kmh,
            overspeeding=status.overspeeding,
            in_crosswalk=status.in_crosswalk,
        )

    @app.post("/eta", response_model=EtaResponse)
    async def eta(request: EtaRequest, svc: DroptimizeService = Depends(get_service)):
        """ETA for a set of parcel destinations from an origin."""
        try:
            result = await svc.estimate_eta(
                GeoPoint(request.origin.latitude, request.origin.longitude),
                _points_in(request.destinations),
                speed_kmh=request.speed_kmh,
                minutes_per_stop=request.minutes_per_stop,
            )
        except InvalidArgument as e:
            raise HTTPException(status_code=422, detail=str(e))
        return EtaResponse(
            minutes=result.minutes,
            text=result.text,
            source=result.source,
            distance_km=result.distance_km,
            order=[_point_out(p) for p in result.order],
        )

    @app.post("/drivers/{driver_id}/eta", response_model=EtaResponse)
    async def driver_eta(driver_id: str, destinations: List[PointIn], svc: DroptimizeService = Depends(get_service)):
        """ETA from a driver's stored position."""
        try:
            result = await svc.driver_eta(driver_id, _points_in(destinations))
        except DriverNotFound:
            raise HTTPException(status_code=404, detail=f"Driver {driver_id} not found")
        except InvalidArgument as e:
            raise HTTPException(status_code=422, detail=str(e))
        return EtaResponse(
            minutes=result.minutes,
            text=result.text,
            source=result.source,
            distance_km=result.distance_km,
            order=[_point_out(p) for p in result.order],
        )

    return app


# Create the app instance
app = create_app()
