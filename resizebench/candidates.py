"""Pillow-backed resize candidates sharing one in-memory source image."""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from PIL import Image, ImageOps

from .benchmarks.config import BenchmarkCase
from .errors import OperationFailure

LOGGER = logging.getLogger("resizebench.candidates")

RESAMPLING_FILTERS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}

FILTER_LABELS: dict[str, str] = {
    "nearest": "Pillow Nearest",
    "bilinear": "Pillow Bilinear",
    "bicubic": "Pillow Bicubic",
    "lanczos": "Pillow Lanczos",
}

FORMAT_EXTENSIONS: dict[str, str] = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "WEBP": ".webp",
}


@dataclass(frozen=True)
class ResizeSettings:
    width: int = 400
    height: int = 0
    quality: int = 90
    save_format: str = "JPEG"

    def target_size(self, source: tuple[int, int]) -> tuple[int, int]:
        """Resolve a zero width or height from the source aspect ratio.

        When both are set the source is cropped to the target aspect first,
        so the returned size never distorts the picture.
        """
        src_w, src_h = source
        if self.width <= 0 and self.height <= 0:
            return src_w, src_h
        if self.height <= 0:
            return self.width, max(1, round(src_h * self.width / src_w))
        if self.width <= 0:
            return max(1, round(src_w * self.height / src_h)), self.height
        return self.width, self.height

    @property
    def crops(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def extension(self) -> str:
        return FORMAT_EXTENSIONS.get(self.save_format.upper(), f".{self.save_format.lower()}")


def resize_bytes(
    source: bytes, settings: ResizeSettings, resample: Image.Resampling
) -> io.BytesIO:
    with Image.open(io.BytesIO(source)) as image:
        image.load()
        size = settings.target_size(image.size)
        if settings.crops:
            resized = ImageOps.fit(image, size, method=resample)
        else:
            resized = image.resize(size, resample=resample)
    if settings.save_format.upper() == "JPEG" and resized.mode not in ("RGB", "L"):
        resized = resized.convert("RGB")

    output = io.BytesIO()
    save_kwargs = {"quality": settings.quality} if settings.quality else {}
    resized.save(output, format=settings.save_format, **save_kwargs)
    return output


def make_operation(
    source: bytes, settings: ResizeSettings, filter_name: str
) -> Callable[[], io.BytesIO]:
    resample = RESAMPLING_FILTERS[filter_name]

    def operation() -> io.BytesIO:
        return resize_bytes(source, settings, resample)

    return operation


def build_cases(
    source: bytes,
    settings: ResizeSettings | None = None,
    filters: Sequence[str] = tuple(RESAMPLING_FILTERS),
) -> list[BenchmarkCase]:
    settings = settings or ResizeSettings()
    unknown = [name for name in filters if name not in RESAMPLING_FILTERS]
    if unknown:
        raise ValueError(f"Unknown resampling filter(s): {', '.join(unknown)}")
    return [
        BenchmarkCase(
            label=FILTER_LABELS[name],
            operation=make_operation(source, settings, name),
            candidate_index=index,
        )
        for index, name in enumerate(filters, start=1)
    ]


def synthetic_image(width: int = 1920, height: int = 1080, quality: int = 95) -> bytes:
    """Gradient JPEG used when no source image is supplied."""
    gradient = Image.linear_gradient("L").resize((width, height))
    mirrored = gradient.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    image = Image.merge("RGB", (gradient, mirrored, gradient))
    buffer = io.BytesIO()
    image.save(buffer, "JPEG", quality=quality)
    return buffer.getvalue()


def slugify(label: str) -> str:
    """File-name-safe form of a candidate label."""
    return re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-") or "candidate"


def render_samples(
    cases: Sequence[BenchmarkCase], output_dir: Path, settings: ResizeSettings
) -> list[Path]:
    """Run each candidate once and keep its output for visual comparison."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for case in cases:
        try:
            result = case.operation()
        except Exception as exc:
            raise OperationFailure(case.label, None, exc) from exc
        path = output_dir / f"img-{slugify(case.label)}{settings.extension}"
        path.write_bytes(result.getvalue())
        LOGGER.info("Wrote sample output %s", path)
        written.append(path)
    return written


__all__ = [
    "RESAMPLING_FILTERS",
    "ResizeSettings",
    "build_cases",
    "make_operation",
    "render_samples",
    "resize_bytes",
    "slugify",
    "synthetic_image",
]
