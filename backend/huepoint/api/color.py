"""POST /api/color: name, contrast and color-vision view of one color."""

from __future__ import annotations

from fastapi import APIRouter

from huepoint.api.segment import color_to_model
from huepoint.engine.color_blindness import adapted_color_name, are_distinguishable, transform_color
from huepoint.engine.color_names import brightness_descriptor, describe_color
from huepoint.models.requests import ColorRequest
from huepoint.models.responses import ColorResponse

router = APIRouter()


@router.post("/color", response_model=ColorResponse)
async def describe(req: ColorRequest) -> ColorResponse:
    r, g, b = req.rgb
    rgb = (r, g, b)
    distinguishable = None
    if req.compare_with is not None:
        cr, cg, cb = req.compare_with
        distinguishable = are_distinguishable(rgb, (cr, cg, cb), req.vision)

    return ColorResponse(
        color=color_to_model(describe_color(rgb)),
        brightness=brightness_descriptor(rgb),
        vision=req.vision.value,
        adapted_name=adapted_color_name(rgb, req.vision),
        simulated_rgb=list(transform_color(rgb, req.vision)),
        distinguishable=distinguishable,
    )
