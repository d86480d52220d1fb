"""POST /api/segment and /api/segment/point: whole-image and tap segmentation."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import time

from fastapi import APIRouter, HTTPException
from PIL import Image, UnidentifiedImageError

from huepoint.dependencies import engine_session, get_settings
from huepoint.engine.errors import InvalidRasterError
from huepoint.engine.models import ColorDescriptor, Mode, Segment
from huepoint.engine.raster import RasterImage
from huepoint.models.requests import SegmentPointRequest, SegmentRequest
from huepoint.models.responses import (
    BoundingBoxModel,
    ColorModel,
    SegmentModel,
    SegmentPointResponse,
    SegmentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/segment")


def decode_image(data: str) -> RasterImage:
    """Base64 (or data URL) PNG/JPEG -> RasterImage. Raises HTTP 400 on bad input."""
    if data.startswith("data:"):
        _, _, data = data.partition(",")
    try:
        raw = base64.b64decode(data, validate=True)
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            return RasterImage.from_pil(img)
    except InvalidRasterError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except (binascii.Error, UnidentifiedImageError, OSError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Could not decode image: {e}") from e


def color_to_model(color: ColorDescriptor) -> ColorModel:
    return ColorModel(
        rgb=list(color.rgb),
        name=color.name,
        hex=color.hex,
        contrast=color.contrast,
        rating=color.rating.value,
        description=color.description,
    )


def segment_to_model(segment: Segment) -> SegmentModel:
    b = segment.bbox
    return SegmentModel(
        id=segment.id,
        bbox=BoundingBoxModel(x=b.x, y=b.y, width=b.width, height=b.height),
        color=color_to_model(segment.color),
        area=segment.area,
        confidence=segment.confidence,
        contour=[[x, y] for x, y in segment.contour],
    )


def _resolve_mode(mode: Mode | None) -> Mode:
    return mode or Mode(get_settings().default_mode)


@router.post("", response_model=SegmentResponse)
def segment_image(req: SegmentRequest) -> SegmentResponse:
    raster = decode_image(req.image)
    mode = _resolve_mode(req.mode)
    logger.debug("Segment request: %s, mode %s", raster, mode.value)

    with engine_session() as engine:
        key = engine.result_cache.generate_key(raster, mode, 0)
        cached = engine.result_cache.get(key)
        if cached is not None:
            return cached.model_copy(update={"cached": True})

        result = engine.segment(raster, mode)
        response = SegmentResponse(
            success=result.success,
            mode=mode.value,
            segments=[segment_to_model(s) for s in result.segments],
            error=result.error,
            processing_time_ms=result.elapsed_ms,
        )
        if result.success:
            engine.result_cache.put(key, response, size=len(response.model_dump_json()))
    return response


@router.post("/point", response_model=SegmentPointResponse)
def segment_point(req: SegmentPointRequest) -> SegmentPointResponse:
    raster = decode_image(req.image)
    mode = _resolve_mode(req.mode)
    sensitivity = req.sensitivity if req.sensitivity is not None else get_settings().default_sensitivity

    start = time.perf_counter()
    with engine_session() as engine:
        segment = engine.segment_by_color(raster, req.x, req.y, sensitivity=sensitivity, mode=mode)
    elapsed = (time.perf_counter() - start) * 1000

    return SegmentPointResponse(
        mode=mode.value,
        segment=segment_to_model(segment) if segment is not None else None,
        processing_time_ms=elapsed,
    )
