"""
Stamping the QR raster onto the template.
"""
from utils.errors import GeometryError


def _has_alpha(img):
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


def composite(template, overlay, top, left):
    """
    Return a copy of ``template`` with ``overlay`` placed at (left, top).

    Opaque overlays replace the destination pixels; overlays with an alpha
    channel are blended over them. ``template`` itself is never modified.

    Raises GeometryError if any part of the overlay would fall outside the
    template.
    """
    tw, th = template.size
    ow, oh = overlay.size

    if left < 0 or top < 0 or left + ow > tw or top + oh > th:
        raise GeometryError(
            f"QR overlay {ow}x{oh} at ({left}, {top}) does not fit template {tw}x{th}"
        )

    result = template.copy()
    if _has_alpha(overlay):
        rgba = overlay.convert("RGBA")
        if result.mode == "RGBA":
            result.alpha_composite(rgba, dest=(left, top))
        else:
            result.paste(rgba, (left, top), rgba)
    else:
        if overlay.mode != result.mode:
            overlay = overlay.convert(result.mode)
        result.paste(overlay, (left, top))
    return result

