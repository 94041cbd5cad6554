# render_context.py
from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from layout_errors import ResourceUnavailableError
from models import CompanyIdentity, Document, DocumentKind
from page_canvas import PageGeometry
from text_metrics import FontSpec

logger = logging.getLogger(__name__)

LOGO_KEY = "logo"


@dataclass(frozen=True)
class Palette:
    primary: str = "#0f172a"
    primary_light: str = "#1e293b"
    accent: str = "#3b82f6"
    accent_light: str = "#60a5fa"
    text: str = "#1e293b"
    muted: str = "#64748b"
    border: str = "#e2e8f0"
    bg_soft: str = "#f8fafc"
    bg_alt: str = "#f1f5f9"
    title_fill: str = "#dbeafe"
    danger: str = "#dc2626"
    success: str = "#10b981"
    warning: str = "#f59e0b"
    notes_fill: str = "#fffbeb"
    notes_border: str = "#fbbf24"
    notes_text: str = "#78350f"
    white: str = "#ffffff"

    def resolve(self, color: Optional[str]) -> Optional[str]:
        """Accepts a palette role name ("muted") or a literal hex colour."""
        if color is None:
            return None
        if color.startswith("#"):
            return color
        return getattr(self, color)


@dataclass(frozen=True)
class FontSet:
    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    italic: str = "Helvetica-Oblique"

    def spec(self, size: float, weight: str = "regular", leading: Optional[float] = None) -> FontSpec:
        return FontSpec(getattr(self, weight), size, leading)


@dataclass(frozen=True)
class LoadedImage:
    data: bytes
    width: float
    height: float

    def fit(self, max_w: float, max_h: float) -> tuple[float, float]:
        scale = min(max_w / float(self.width), max_h / float(self.height))
        return self.width * scale, self.height * scale


@dataclass(frozen=True)
class RenderContext:
    """
    Everything a single render call needs. Built fresh for every call and
    passed explicitly to renderers; nothing about a render lives in module or
    class state.
    """
    geometry: PageGeometry
    fonts: FontSet
    palette: Palette
    identity: CompanyIdentity
    kind: DocumentKind
    title: str
    currency_prefix: str = "Rs. "
    document_label: str = ""
    images: Mapping[str, LoadedImage] = field(default_factory=dict)

    def font(self, size: float, weight: str = "regular", leading: Optional[float] = None) -> FontSpec:
        return self.fonts.spec(size, weight, leading)

    def color(self, role: Optional[str]) -> Optional[str]:
        return self.palette.resolve(role)

    @property
    def logo(self) -> Optional[LoadedImage]:
        return self.images.get(LOGO_KEY)


def chrome_title(kind: DocumentKind) -> str:
    return "TAX INVOICE" if kind == DocumentKind.INVOICE else "COMMERCIAL PROPOSAL"


# -----------------------------
# Asset loading
# -----------------------------
def load_image(path: str) -> LoadedImage:
    if not path or not os.path.exists(path):
        raise ResourceUnavailableError(f"image not found: {path!r}")
    try:
        with open(path, "rb") as fh:
            data = fh.read()
        iw, ih = ImageReader(io.BytesIO(data)).getSize()
    except Exception as e:
        raise ResourceUnavailableError(f"image unreadable: {path!r} ({e})") from e
    if not iw or not ih:
        raise ResourceUnavailableError(f"image has no size: {path!r}")
    return LoadedImage(data, float(iw), float(ih))


def register_font(face_name: str, path: str) -> str:
    if face_name in pdfmetrics.getRegisteredFontNames():
        return face_name
    if not path or not os.path.exists(path):
        raise ResourceUnavailableError(f"font not found: {path!r}")
    try:
        pdfmetrics.registerFont(TTFont(face_name, path))
    except Exception as e:
        raise ResourceUnavailableError(f"font unreadable: {path!r} ({e})") from e
    return face_name


# -----------------------------
# Builder
# -----------------------------
class RenderContextBuilder:
    def __init__(self):
        self._geometry = PageGeometry()
        self._palette = Palette()
        self._identity: Optional[CompanyIdentity] = None
        self._kind = DocumentKind.QUOTE
        self._title: Optional[str] = None
        self._label = ""
        self._currency = "Rs. "
        self._default_company = ""
        self._logo_path = ""
        self._font_paths: dict[str, str] = {}

    def for_document(self, document: Document) -> "RenderContextBuilder":
        self._identity = document.company
        self._kind = document.kind
        self._label = document.number
        return self

    def with_default_company(self, name: str) -> "RenderContextBuilder":
        self._default_company = (name or "").strip()
        return self

    def with_title(self, title: str) -> "RenderContextBuilder":
        self._title = title
        return self

    def with_palette(self, palette: Palette) -> "RenderContextBuilder":
        self._palette = palette
        return self

    def with_logo(self, path: Optional[str]) -> "RenderContextBuilder":
        self._logo_path = (path or "").strip()
        return self

    def with_fonts(self, regular: str = "", bold: str = "", italic: str = "") -> "RenderContextBuilder":
        self._font_paths = {"regular": regular or "", "bold": bold or "", "italic": italic or ""}
        return self

    def with_currency(self, prefix: str) -> "RenderContextBuilder":
        self._currency = prefix
        return self

    def _build_fonts(self) -> FontSet:
        defaults = FontSet()
        faces = {}
        for weight in ("regular", "bold", "italic"):
            path = self._font_paths.get(weight, "")
            if not path:
                faces[weight] = getattr(defaults, weight)
                continue
            try:
                faces[weight] = register_font(f"Doc-{weight.title()}-{os.path.basename(path)}", path)
            except ResourceUnavailableError as e:
                logger.warning("Falling back to %s: %s", getattr(defaults, weight), e)
                faces[weight] = getattr(defaults, weight)
        return FontSet(**faces)

    def _build_images(self) -> Mapping[str, LoadedImage]:
        images = {}
        if self._logo_path:
            try:
                images[LOGO_KEY] = load_image(self._logo_path)
            except ResourceUnavailableError as e:
                logger.warning("Logo unavailable, using text placeholder: %s", e)
        return MappingProxyType(images)

    def build(self) -> RenderContext:
        identity = self._identity or CompanyIdentity(name="")
        if not identity.name and self._default_company:
            identity = replace(identity, name=self._default_company)
        return RenderContext(
            geometry=self._geometry,
            fonts=self._build_fonts(),
            palette=self._palette,
            identity=identity,
            kind=self._kind,
            title=self._title or chrome_title(self._kind),
            currency_prefix=self._currency,
            document_label=self._label,
            images=self._build_images(),
        )
